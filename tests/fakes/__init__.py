from tests.fakes.fake_clock import FakeClock, FakeSleep
from tests.fakes.fake_reader import FlakyReader
from tests.fakes.fake_replies import seed_center, seed_centers_reply
from tests.fakes.fake_transport import FakeTransport, make_response

__all__ = [
    "FakeClock",
    "FakeSleep",
    "FakeTransport",
    "FlakyReader",
    "make_response",
    "seed_center",
    "seed_centers_reply",
]
