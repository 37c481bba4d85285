import threading

from neurobuddy.chat.coordinator import APOLOGY_MESSAGE, SESSION_ERROR_MESSAGE, TurnCoordinator
from neurobuddy.domain.exceptions import NetworkError
from neurobuddy.domain.models import ChatReply, ChatState, CitationCandidate


class FakeSession:
    name = "fake"

    def __init__(self, replies=None):
        self.sent = []
        self._replies = list(replies or [])

    def send(self, text):
        self.sent.append(text)
        if self._replies:
            return self._replies.pop(0)
        return ChatReply(text=f"R{len(self.sent)}")


class FailingSession:
    name = "failing"

    def __init__(self):
        self.calls = 0

    def send(self, text):
        self.calls += 1
        raise NetworkError(code="NETWORK_ERROR", message="boom")


class BlockingSession:
    name = "blocking"

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.sent = []

    def send(self, text):
        self.sent.append(text)
        self.started.set()
        assert self.release.wait(timeout=5)
        return ChatReply(text="late")


def _log(coordinator):
    return [(t.role, t.text) for t in coordinator.turns]


def test_sequential_submissions_keep_order():
    coordinator = TurnCoordinator(FakeSession())
    assert coordinator.submit("Q1")
    assert coordinator.submit("Q2")
    assert _log(coordinator) == [("user", "Q1"), ("model", "R1"), ("user", "Q2"), ("model", "R2")]
    assert coordinator.state is ChatState.IDLE


def test_empty_input_is_ignored():
    session = FakeSession()
    coordinator = TurnCoordinator(session)
    assert not coordinator.submit("")
    assert not coordinator.submit("   ")
    assert coordinator.turns == ()
    assert session.sent == []


def test_input_is_trimmed_before_sending():
    session = FakeSession()
    coordinator = TurnCoordinator(session)
    coordinator.submit("  ¿Qué hace el nervio vago?  ")
    assert session.sent == ["¿Qué hace el nervio vago?"]
    assert coordinator.turns[0].text == "¿Qué hace el nervio vago?"


def test_reply_sources_are_filtered_and_deduplicated():
    reply = ChatReply(
        text="El nervio **vago** (X)\nes mixto.",
        citations=[
            CitationCandidate(uri="https://a", title="A"),
            CitationCandidate(uri="", title="sin uri"),
            CitationCandidate(uri="https://a", title="A bis"),
            CitationCandidate(uri="https://b", title="B"),
        ],
    )
    coordinator = TurnCoordinator(FakeSession([reply]))
    coordinator.submit("vago")
    model_turn = coordinator.turns[-1]
    assert model_turn.text == "El nervio **vago** (X)\nes mixto."
    assert [(s.uri, s.title) for s in model_turn.sources] == [("https://a", "A"), ("https://b", "B")]


def test_failure_appends_apology_and_allows_retry():
    session = FailingSession()
    coordinator = TurnCoordinator(session)
    assert coordinator.submit("Q1")
    assert _log(coordinator) == [("user", "Q1"), ("model", APOLOGY_MESSAGE)]
    assert coordinator.turns[-1].sources == ()
    assert coordinator.state is ChatState.IDLE
    assert coordinator.error == APOLOGY_MESSAGE
    assert coordinator.submit("Q1")
    assert session.calls == 2


def test_error_cleared_on_next_submit():
    class FlakySession(FakeSession):
        def send(self, text):
            if not self.sent:
                self.sent.append(text)
                raise RuntimeError("quota")
            return super().send(text)

    coordinator = TurnCoordinator(FlakySession())
    coordinator.submit("Q1")
    assert coordinator.error == APOLOGY_MESSAGE
    coordinator.submit("Q2")
    assert coordinator.error is None
    assert coordinator.turns[-1].text == "R2"


def test_missing_session_rejects_input():
    coordinator = TurnCoordinator(None)
    assert coordinator.state is ChatState.ERROR
    assert coordinator.error == SESSION_ERROR_MESSAGE
    assert not coordinator.submit("hola")
    assert coordinator.turns == ()


def test_submit_while_awaiting_is_rejected():
    session = BlockingSession()
    coordinator = TurnCoordinator(session)
    results = []
    worker = threading.Thread(target=lambda: results.append(coordinator.submit("Q1")))
    worker.start()
    assert session.started.wait(timeout=5)

    assert coordinator.state is ChatState.AWAITING_RESPONSE
    assert not coordinator.submit("Q2")
    assert _log(coordinator) == [("user", "Q1")]

    session.release.set()
    worker.join(timeout=5)
    assert results == [True]
    assert session.sent == ["Q1"]
    assert _log(coordinator) == [("user", "Q1"), ("model", "late")]
    assert coordinator.state is ChatState.IDLE


def test_listeners_see_optimistic_user_turn_then_result():
    coordinator = TurnCoordinator(FakeSession())
    seen = []
    coordinator.add_listener(lambda snap: seen.append((snap.state, len(snap.turns))))
    coordinator.submit("Q1")
    assert seen == [(ChatState.AWAITING_RESPONSE, 1), (ChatState.IDLE, 2)]


def test_failing_listener_does_not_break_submit():
    coordinator = TurnCoordinator(FakeSession())

    def bad_listener(snap):
        raise ValueError("ui gone")

    coordinator.add_listener(bad_listener)
    assert coordinator.submit("Q1")
    assert len(coordinator.turns) == 2


def test_snapshot_is_read_only_copy():
    coordinator = TurnCoordinator(FakeSession())
    coordinator.submit("Q1")
    snap = coordinator.snapshot()
    coordinator.submit("Q2")
    assert len(snap.turns) == 2
    assert len(coordinator.snapshot().turns) == 4


class ReplySession:
    name = "reply"

    def __init__(self, reply):
        self.reply = reply
        self.calls = 0

    def send(self, text):
        self.calls += 1
        return self.reply


def test_unhashable_citation_uri_is_dropped_and_retry_accepted():
    reply = ChatReply(
        text="respuesta",
        citations=[
            CitationCandidate(uri=["https://a"], title="T"),
            CitationCandidate(uri="https://b", title="B"),
        ],
    )
    session = ReplySession(reply)
    coordinator = TurnCoordinator(session)
    assert coordinator.submit("Q1")
    assert coordinator.state is ChatState.IDLE
    assert coordinator.turns[-1].text == "respuesta"
    assert [(s.uri, s.title) for s in coordinator.turns[-1].sources] == [("https://b", "B")]
    assert coordinator.submit("Q2")
    assert session.calls == 2


def test_non_string_citation_fields_never_reach_sources():
    reply = ChatReply(
        text="ok",
        citations=[CitationCandidate(uri=5, title="T"), CitationCandidate(uri="https://c", title=7)],
    )
    coordinator = TurnCoordinator(ReplySession(reply))
    coordinator.submit("Q1")
    assert coordinator.turns[-1].sources == ()
    assert coordinator.error is None


def test_unprocessable_reply_falls_back_to_apology():
    class BrokenReply:
        text = "ok"

        @property
        def citations(self):
            raise TypeError("citations unavailable")

    session = ReplySession(BrokenReply())
    coordinator = TurnCoordinator(session)
    assert coordinator.submit("Q1")
    assert _log(coordinator) == [("user", "Q1"), ("model", APOLOGY_MESSAGE)]
    assert coordinator.state is ChatState.IDLE
    assert coordinator.error == APOLOGY_MESSAGE
    assert coordinator.submit("Q2")
    assert session.calls == 2


def test_non_string_reply_text_falls_back_to_apology():
    coordinator = TurnCoordinator(ReplySession(ChatReply(text=None)))
    coordinator.submit("Q1")
    assert coordinator.turns[-1].text == APOLOGY_MESSAGE
    assert coordinator.state is ChatState.IDLE
