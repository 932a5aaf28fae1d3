from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from pathlib import Path

from .app_logging import LOGGER_NAME, log_with_fields
from .channels import Receiver, Sender, channel
from .errors import ChannelClosedError, ComputeError, FileError, InitError, RunnerError
from .events import EventKind, LifecycleEvent, LoggingObserver, Observer
from .models import READING_INPUT, RUNNING, Answer, JobFailure, Part, PartId, Status
from .utils import input_path_for

Outcome = Answer | JobFailure


class _WorkerStopped(Exception):
    def __init__(self, error: RunnerError) -> None:
        super().__init__(str(error))
        self.error = error


class Executor:
    """Fixed pool of worker threads fed through a job channel.

    Parts sent on ``submissions`` are claimed by whichever worker is idle.
    Each worker reports ``ReadingInput``, ``Running`` and ``Completed`` answers
    on ``answers``. Closing every submission sender lets the workers drain and
    exit, after which ``answers`` closes as well.

    With ``fail_fast`` disabled a missing input or a failing computation is
    reported as a ``JobFailure`` and the worker moves on to the next part.
    With ``fail_fast`` enabled such an error stops the worker thread.
    """

    def __init__(
        self,
        workers: int,
        input_root: Path,
        *,
        observer: Observer | None = None,
        fail_fast: bool = False,
    ) -> None:
        if workers < 1:
            raise ValueError("`workers` must be >= 1")
        self.input_root = Path(input_root)
        self.observer = observer or LoggingObserver()
        self.fail_fast = fail_fast
        self.logger = logging.getLogger(LOGGER_NAME)

        job_tx, job_rx = channel()
        ans_tx, ans_rx = channel()
        self.submissions: Sender[Part] = job_tx
        self.answers: Receiver[Outcome] = ans_rx
        self._errors: list[list[RunnerError]] = []
        self._threads: list[threading.Thread] = []

        try:
            for index in range(workers):
                self._spawn(index, job_rx.clone(), ans_tx.clone())
        except RuntimeError as exc:
            log_with_fields(self.logger, logging.ERROR, "worker_spawn_failed", started=len(self._threads), error=str(exc))
            job_tx.close()
            for thread in self._threads:
                thread.join()
            raise InitError(f"failed to start worker {len(self._threads)}: {exc}") from exc
        finally:
            # Workers hold their own clones; the answer side closes when the last one exits.
            job_rx.close()
            ans_tx.close()

    @classmethod
    def create(
        cls,
        workers: int,
        input_root: Path,
        *,
        observer: Observer | None = None,
        fail_fast: bool = False,
    ) -> Executor:
        return cls(workers, input_root, observer=observer, fail_fast=fail_fast)

    @property
    def worker_count(self) -> int:
        return len(self._threads)

    def _spawn(self, index: int, job_rx: Receiver[Part], ans_tx: Sender[Outcome]) -> None:
        errors: list[RunnerError] = []
        thread = threading.Thread(
            target=self._run_worker,
            args=(job_rx, ans_tx, errors),
            name=f"part-worker-{index}",
            daemon=True,
        )
        try:
            thread.start()
        except RuntimeError:
            job_rx.close()
            ans_tx.close()
            raise
        self._errors.append(errors)
        self._threads.append(thread)

    def _emit(
        self,
        kind: EventKind,
        *,
        part_id: PartId | None = None,
        status: Status | None = None,
        error: BaseException | None = None,
    ) -> None:
        event = LifecycleEvent(kind, threading.current_thread().name, part_id=part_id, status=status, error=error)
        self.observer.on_event(event)

    def _run_worker(self, job_rx: Receiver[Part], ans_tx: Sender[Outcome], errors: list[RunnerError]) -> None:
        self._emit(EventKind.WORKER_STARTED)
        try:
            for part in job_rx:
                self._process(part, ans_tx, errors)
            self._emit(EventKind.WORKER_STOPPED)
        except _WorkerStopped as stop:
            errors.append(stop.error)
            self._emit(EventKind.WORKER_STOPPED, error=stop.error)
        except Exception as exc:
            self._emit(EventKind.WORKER_CRASHED, error=exc)
            raise
        finally:
            job_rx.close()
            ans_tx.close()

    def _send(self, ans_tx: Sender[Outcome], outcome: Outcome) -> None:
        try:
            ans_tx.send(outcome)
        except ChannelClosedError as exc:
            raise _WorkerStopped(exc) from exc
        if isinstance(outcome, Answer):
            self._emit(EventKind.STATUS_CHANGED, part_id=outcome.id, status=outcome.status)

    def _process(self, part: Part, ans_tx: Sender[Outcome], errors: list[RunnerError]) -> None:
        self._emit(EventKind.JOB_RECEIVED, part_id=part.id)
        try:
            answer = self._execute(part, ans_tx)
        except (FileError, ComputeError) as exc:
            self._emit(EventKind.JOB_FAILED, part_id=part.id, error=exc)
            if self.fail_fast:
                raise _WorkerStopped(exc) from exc
            errors.append(exc)
            self._send(ans_tx, JobFailure(part.id, exc))
            return
        self._send(ans_tx, answer)

    def _execute(self, part: Part, ans_tx: Sender[Outcome]) -> Answer:
        self._send(ans_tx, Answer(part.id, READING_INPUT))
        path = input_path_for(self.input_root, part.id.year, part.id.day)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise FileError(part.id, path, exc.strerror or str(exc)) from exc

        self._send(ans_tx, Answer(part.id, RUNNING))
        try:
            return part.run(data)
        except ComputeError:
            raise
        except Exception as exc:
            raise ComputeError(part.id, f"{type(exc).__name__}: {exc}") from exc

    def submit(self, part: Part) -> None:
        self.submissions.send(part)

    def submit_all(self, parts: Iterable[Part]) -> list[Part]:
        """Submit parts in order and return those the pool no longer accepts.

        Submission stops at the first part refused because every worker has
        stopped, which can happen with ``fail_fast``. The cause is reported by
        ``join``.
        """
        pending = list(parts)
        for index, part in enumerate(pending):
            try:
                self.submit(part)
            except ChannelClosedError as exc:
                rejected = pending[index:]
                log_with_fields(
                    self.logger,
                    logging.WARNING,
                    "submission_stopped",
                    part=str(part.id),
                    rejected=len(rejected),
                    error=str(exc),
                )
                return rejected
        return []

    def close(self) -> None:
        self.submissions.close()

    def drain(self) -> Iterator[Outcome]:
        yield from self.answers

    def join(self) -> None:
        first: RunnerError | None = None
        for thread, errors in zip(self._threads, self._errors):
            thread.join()
            if errors and first is None:
                first = errors[0]
        if first is not None:
            raise first

    def run(self, parts: Iterable[Part]) -> list[Outcome]:
        rejected = self.submit_all(parts)
        self.close()
        outcomes = list(self.drain())
        self.join()
        if rejected:
            raise ChannelClosedError(f"{len(rejected)} parts not accepted: no worker left")
        return outcomes

    def __enter__(self) -> Executor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
        self.join()

