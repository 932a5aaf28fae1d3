"""Unbounded multi-producer/multi-consumer channels.

A channel stays open for receiving while at least one sender handle is open,
and open for sending while at least one receiver handle is open. Handles are
cloned to share them between threads and closed when a thread is done with
them.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Generic, Iterator, TypeVar

from .errors import ChannelClosedError

T = TypeVar("T")


class ChannelClosed(Exception):
    """Raised by ``recv`` once every sender is closed and the buffer is empty."""


class ChannelEmpty(Exception):
    pass


class _State(Generic[T]):
    def __init__(self) -> None:
        self.items: deque[T] = deque()
        self.cond = threading.Condition()
        self.senders = 0
        self.receivers = 0


class Sender(Generic[T]):
    def __init__(self, state: _State[T]) -> None:
        self._state = state
        self._closed = False
        with state.cond:
            state.senders += 1

    def send(self, item: T) -> None:
        state = self._state
        with state.cond:
            if self._closed:
                raise ChannelClosedError("send on a closed sender")
            if state.receivers == 0:
                raise ChannelClosedError("sending on a channel with no receivers")
            state.items.append(item)
            state.cond.notify()

    def clone(self) -> Sender[T]:
        with self._state.cond:
            if self._closed:
                raise ChannelClosedError("cannot clone a closed sender")
            return Sender(self._state)

    def close(self) -> None:
        state = self._state
        with state.cond:
            if self._closed:
                return
            self._closed = True
            state.senders -= 1
            if state.senders == 0:
                state.cond.notify_all()

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> Sender[T]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class Receiver(Generic[T]):
    def __init__(self, state: _State[T]) -> None:
        self._state = state
        self._closed = False
        with state.cond:
            state.receivers += 1

    def recv(self, timeout: float | None = None) -> T:
        state = self._state
        with state.cond:
            self._check_open()
            while not state.items:
                if state.senders == 0:
                    raise ChannelClosed()
                if not state.cond.wait(timeout):
                    raise ChannelEmpty()
            return state.items.popleft()

    def try_recv(self) -> T:
        state = self._state
        with state.cond:
            self._check_open()
            if state.items:
                return state.items.popleft()
            if state.senders == 0:
                raise ChannelClosed()
            raise ChannelEmpty()

    def clone(self) -> Receiver[T]:
        with self._state.cond:
            self._check_open()
            return Receiver(self._state)

    def _check_open(self) -> None:
        if self._closed:
            raise ChannelClosedError("receiver is closed")

    def close(self) -> None:
        state = self._state
        with state.cond:
            if self._closed:
                return
            self._closed = True
            state.receivers -= 1

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.recv()
            except ChannelClosed:
                return

    def __len__(self) -> int:
        with self._state.cond:
            return len(self._state.items)


def channel() -> tuple[Sender[T], Receiver[T]]:
    state: _State[T] = _State()
    return Sender(state), Receiver(state)
