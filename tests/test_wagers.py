"""
Tests for wager capture and final results
"""
from jeopardy.core.wagers import FinalResults, WagerLedger, final_delta
from jeopardy.models import FinalOutcome


def test_wager_defaults_to_zero():
    ledger = WagerLedger()
    assert ledger.get("final", "team-1") == 0
    assert ledger.for_clue("final") == {}


def test_wager_clamped_and_overwritten():
    """Negative wagers become 0; later entries replace earlier ones"""
    ledger = WagerLedger()
    assert ledger.record("final", "team-1", -300) == 0
    assert ledger.record("final", "team-1", 500) == 500
    assert ledger.record("final", "team-1", 250) == 250
    assert ledger.for_clue("final") == {"team-1": 250}


def test_wagers_are_per_clue():
    ledger = WagerLedger()
    ledger.record("c0-q1", "team-1", 100)
    ledger.record("final", "team-1", 900)
    assert ledger.get("c0-q1", "team-1") == 100
    assert ledger.get("final", "team-1") == 900
    assert "c0-q1" in ledger
    ledger.clear()
    assert "final" not in ledger


def test_final_results_judged_once():
    results = FinalResults()
    assert results.record("team-1", FinalOutcome.CORRECT)
    assert not results.record("team-1", FinalOutcome.INCORRECT)
    assert results.get("team-1") == FinalOutcome.CORRECT
    assert results.as_dict() == {"team-1": "correct"}


def test_final_delta():
    assert final_delta(300, FinalOutcome.CORRECT) == 300
    assert final_delta(300, FinalOutcome.INCORRECT) == -300
