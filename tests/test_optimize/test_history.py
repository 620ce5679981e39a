import numpy as np

from cgtrain.optimize import HistoryRecorder, HistoryReservation
from cgtrain.optimize.history import QUANTITIES


def _record(recorder, k, size=3, selection=None):
    vector = np.full(size, float(k))
    recorder.record(
        parameters=vector,
        parameters_norm=float(k),
        performance=10.0 - k,
        selection_performance=selection,
        gradient=-vector,
        gradient_norm=float(k) / 2,
        training_direction=vector * 2,
        training_rate=0.1 * k,
        elapsed_time=0.01 * k,
    )


def test_default_reservation():
    reservation = HistoryReservation()
    assert reservation.enabled() == ("performance", "gradient_norm")


def test_reservation_all_and_set_all():
    reservation = HistoryReservation.all()
    assert reservation.enabled() == QUANTITIES
    reservation.set_all(False)
    assert reservation.enabled() == ()


def test_only_reserved_quantities_are_kept():
    reservation = HistoryReservation(performance=False, gradient_norm=False, training_rate=True, gradient=True)
    recorder = HistoryRecorder(reservation, size=3, maximum_iterations_number=10)
    for k in range(4):
        _record(recorder, k)
    history = recorder.snapshot()
    assert set(history.reserved()) == {"training_rate", "gradient"}
    assert history.performance is None
    assert history.gradient.shape == (4, 3)
    assert np.allclose(history.training_rate, [0.0, 0.1, 0.2, 0.3])


def test_buffers_trimmed_to_recorded_length():
    recorder = HistoryRecorder(HistoryReservation.all(), size=2, maximum_iterations_number=100)
    for k in range(3):
        _record(recorder, k, size=2)
    history = recorder.snapshot()
    for name, values in history.reserved().items():
        assert len(values) == 3, name


def test_buffers_grow_past_presized_capacity():
    recorder = HistoryRecorder(HistoryReservation(parameters=True), size=2, maximum_iterations_number=1)
    for k in range(9):
        _record(recorder, k, size=2)
    history = recorder.snapshot()
    assert history.parameters.shape == (9, 2)
    assert np.array_equal(history.parameters[:, 0], np.arange(9, dtype=float))


def test_missing_selection_performance_is_nan():
    recorder = HistoryRecorder(HistoryReservation(selection_performance=True), size=1, maximum_iterations_number=2)
    _record(recorder, 0, size=1)
    _record(recorder, 1, size=1, selection=0.5)
    values = recorder.snapshot().selection_performance
    assert np.isnan(values[0])
    assert values[1] == 0.5


def test_snapshot_is_independent_of_later_records():
    recorder = HistoryRecorder(HistoryReservation(), size=1, maximum_iterations_number=5)
    _record(recorder, 0, size=1)
    first = recorder.snapshot()
    _record(recorder, 1, size=1)
    assert len(first.performance) == 1
    assert len(recorder.snapshot().performance) == 2
