import pytest

from guessnumber.services.rounds.simulation import SimulationResult, run_rounds, simulate_rtp

EXPECTED_RTP = 0.99


def test_short_run_accounts_every_round():
    result = run_rounds(1_000, stake=10.0, seed=7)
    assert result.rounds == 1_000
    assert result.wagered == pytest.approx(10_000.0)
    assert result.won == pytest.approx(result.wins * 99.0)


def test_simulation_splits_rounds_across_workers():
    result = simulate_rtp(1_003, stake=1.0, workers=4, seed=11)
    assert result.rounds == 1_003
    assert result.wagered == pytest.approx(1_003.0)


def test_merge_adds_totals():
    merged = SimulationResult(2, 20.0, 99.0, 1).merge(SimulationResult(3, 30.0, 0.0, 0))
    assert merged == SimulationResult(5, 50.0, 99.0, 1)
    assert SimulationResult().rtp == 0.0


def test_return_to_player_converges():
    result = simulate_rtp(300_000, stake=100.0, workers=4, seed=2024)

    assert result.rounds == 300_000
    assert result.wagered == pytest.approx(300_000 * 100.0)
    assert result.rtp == pytest.approx(EXPECTED_RTP, abs=0.02)
    # one number in ten hits
    assert result.win_rate * 10 == pytest.approx(1.0, abs=0.02)
