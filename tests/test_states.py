import pytest

from enwikprep.states import RunMap, State


def test_base_state_predicts_half():
    state = State()
    assert state.init_probability(17) == 0.5


def test_base_state_always_returns_to_zero():
    state = State()
    assert [state.next(s, b) for s in (0, 5, 200) for b in (0, 1)] == [0] * 6


def test_run_map_transitions_stay_in_range():
    run_map = RunMap()
    for state in range(256):
        for bit in (0, 1):
            assert 0 <= run_map.next(state, bit) <= 255


def test_run_map_one_after_zero_run_starts_one_run():
    run_map = RunMap()
    for state in range(128):
        assert run_map.next(state, 1) == 128


def test_run_map_zero_after_one_run_resets():
    run_map = RunMap()
    for state in range(128, 256):
        assert run_map.next(state, 0) == 0


def test_run_map_zero_run_saturates():
    run_map = RunMap()
    state = 0
    seen = [state]
    for _ in range(300):
        state = run_map.next(state, 0)
        seen.append(state)
    assert seen[:128] == list(range(128))
    assert set(seen[127:]) == {127}


def test_run_map_one_run_saturates():
    run_map = RunMap()
    state = run_map.next(0, 1)
    for _ in range(300):
        state = run_map.next(state, 1)
    assert state == 255
    assert run_map.next(255, 1) == 255


def test_run_map_probabilities_are_valid():
    run_map = RunMap()
    for state in range(256):
        assert 0.0 < run_map.init_probability(state) <= 1.0


def test_run_map_probability_monotonic_in_each_half():
    run_map = RunMap()
    zeros = [run_map.init_probability(s) for s in range(128)]
    ones = [run_map.init_probability(s) for s in range(128, 256)]
    assert zeros == sorted(zeros, reverse=True)
    assert ones == sorted(ones)


def test_run_map_zero_and_one_start_are_even():
    run_map = RunMap()
    assert run_map.init_probability(0) == run_map.init_probability(128)


@pytest.mark.parametrize("state,bit", [(-1, 0), (256, 1), (3, 2)])
def test_run_map_rejects_bad_arguments(state, bit):
    with pytest.raises(ValueError):
        RunMap().next(state, bit)