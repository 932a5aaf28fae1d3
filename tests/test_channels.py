import threading
import unittest

from partrunner.channels import ChannelClosed, ChannelEmpty, channel
from partrunner.errors import ChannelClosedError


class ChannelTest(unittest.TestCase):
    def test_receiver_drains_then_closes(self) -> None:
        tx, rx = channel()
        tx.send(1)
        tx.send(2)
        tx.close()
        self.assertEqual(list(rx), [1, 2])
        with self.assertRaises(ChannelClosed):
            rx.recv()

    def test_stays_open_while_a_clone_is_open(self) -> None:
        tx, rx = channel()
        other = tx.clone()
        tx.close()
        with self.assertRaises(ChannelEmpty):
            rx.try_recv()
        other.send("x")
        other.close()
        self.assertEqual(rx.recv(), "x")
        with self.assertRaises(ChannelClosed):
            rx.try_recv()

    def test_send_without_receivers_fails(self) -> None:
        tx, rx = channel()
        rx.close()
        with self.assertRaises(ChannelClosedError):
            tx.send(1)

    def test_send_on_closed_sender_fails(self) -> None:
        tx, _rx = channel()
        tx.close()
        with self.assertRaises(ChannelClosedError):
            tx.send(1)

    def test_closed_handles_refuse_use(self) -> None:
        tx, rx = channel()
        extra = rx.clone()
        extra.close()
        with self.assertRaises(ChannelClosedError):
            extra.recv()
        with self.assertRaises(ChannelClosedError):
            extra.try_recv()
        with self.assertRaises(ChannelClosedError):
            extra.clone()
        tx.close()
        with self.assertRaises(ChannelClosedError):
            tx.clone()
        self.assertEqual(list(rx), [])

    def test_recv_timeout(self) -> None:
        tx, rx = channel()
        with self.assertRaises(ChannelEmpty):
            rx.recv(timeout=0.01)
        tx.close()

    def test_many_senders_many_receivers(self) -> None:
        tx, rx = channel()
        received: list[int] = []
        lock = threading.Lock()

        def produce(sender, start: int) -> None:
            with sender:
                for value in range(start, start + 100):
                    sender.send(value)

        def consume(receiver) -> None:
            for value in receiver:
                with lock:
                    received.append(value)
            receiver.close()

        producers = [threading.Thread(target=produce, args=(tx.clone(), idx * 100)) for idx in range(4)]
        consumers = [threading.Thread(target=consume, args=(rx.clone(),)) for _ in range(3)]
        tx.close()
        for thread in producers + consumers:
            thread.start()
        for thread in producers + consumers:
            thread.join(timeout=10)
        self.assertEqual(sorted(received), list(range(400)))


if __name__ == "__main__":
    unittest.main()
