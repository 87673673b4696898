import pytest

from scheduling_sim.engine import run_algorithm, run_fcfs, run_round_robin, run_sjf, simulate
from scheduling_sim.errors import InvalidInputError, InvalidParameterError
from scheduling_sim.models import Process
from scheduling_sim.policies import SJF, RoundRobin


def _procs():
    return [
        Process(1, "P1", arrival_time=0, burst_time=5),
        Process(2, "P2", arrival_time=1, burst_time=3),
        Process(3, "P3", arrival_time=2, burst_time=8),
        Process(4, "P4", arrival_time=3, burst_time=6),
    ]


def _by_name(result):
    return {p.name: p for p in result.processes}


def test_fcfs_sample():
    res = run_fcfs(_procs())
    assert res.completion_order == ["P1", "P2", "P3", "P4"]
    assert [p.completion_time for p in res.processes] == [5, 8, 16, 22]
    assert [p.turnaround_time for p in res.processes] == [5, 7, 14, 19]
    assert [p.waiting_time for p in res.processes] == [0, 4, 6, 13]
    assert res.avg_waiting_time == pytest.approx(5.75)
    assert res.avg_turnaround_time == pytest.approx(11.25)
    assert res.algorithm == "FCFS"
    assert res.quantum is None


def test_fcfs_arrival_ties_keep_input_order():
    procs = [
        Process(5, "X", arrival_time=2, burst_time=1),
        Process(3, "Y", arrival_time=2, burst_time=1),
        Process(1, "Z", arrival_time=0, burst_time=4),
    ]
    res = run_fcfs(procs)
    assert res.completion_order == ["Z", "X", "Y"]


def test_fcfs_idle_gap():
    procs = [
        Process(1, "A", arrival_time=0, burst_time=2),
        Process(2, "B", arrival_time=5, burst_time=3),
    ]
    res = run_fcfs(procs)
    b = _by_name(res)["B"]
    assert b.completion_time == 8
    assert b.waiting_time == 0
    assert [(s.start_time, s.end_time) for s in res.timeline] == [(0, 2), (5, 8)]


def test_sjf_sample():
    res = run_sjf(_procs())
    assert res.completion_order == ["P1", "P2", "P4", "P3"]
    assert [p.completion_time for p in res.processes] == [5, 8, 14, 22]
    assert [p.waiting_time for p in res.processes] == [0, 4, 5, 12]
    assert res.avg_waiting_time == pytest.approx(5.25)
    assert res.avg_turnaround_time == pytest.approx(10.75)


def test_sjf_picks_shortest_ready():
    procs = [
        Process(1, "A", arrival_time=0, burst_time=3),
        Process(2, "B", arrival_time=1, burst_time=2),
        Process(3, "C", arrival_time=0, burst_time=2),
    ]
    res = run_sjf(procs)
    assert res.completion_order == ["C", "B", "A"]


def test_sjf_tie_goes_to_lowest_input_index():
    # Late and Mid have equal bursts; Late is listed first although Mid arrived earlier.
    procs = [
        Process(1, "Late", arrival_time=2, burst_time=3),
        Process(2, "Early", arrival_time=0, burst_time=5),
        Process(3, "Mid", arrival_time=1, burst_time=3),
    ]
    res = run_sjf(procs)
    assert res.completion_order == ["Early", "Late", "Mid"]


def test_sjf_idle_until_first_arrival():
    procs = [
        Process(1, "A", arrival_time=3, burst_time=2),
        Process(2, "B", arrival_time=10, burst_time=1),
    ]
    res = run_sjf(procs)
    assert [p.completion_time for p in res.processes] == [5, 11]
    assert [p.waiting_time for p in res.processes] == [0, 0]


def test_rr_quantum_2_reference_trace():
    res = run_round_robin(_procs(), quantum=2)
    assert [(s.name, s.start_time, s.end_time) for s in res.timeline] == [
        ("P1", 0, 2),
        ("P2", 2, 4),
        ("P3", 4, 6),
        ("P1", 6, 8),
        ("P4", 8, 10),
        ("P2", 10, 11),
        ("P3", 11, 13),
        ("P1", 13, 14),
        ("P4", 14, 16),
        ("P3", 16, 18),
        ("P4", 18, 20),
        ("P3", 20, 22),
    ]
    assert res.completion_order == ["P2", "P1", "P4", "P3"]
    assert [p.completion_time for p in res.processes] == [11, 14, 20, 22]
    assert [p.waiting_time for p in res.processes] == [7, 9, 11, 12]
    assert res.avg_waiting_time == pytest.approx(9.75)
    assert res.avg_turnaround_time == pytest.approx(15.25)
    assert res.quantum == 2

    by_name = _by_name(res)
    assert by_name["P4"].start_time == 8
    assert by_name["P4"].response_time == 5


def test_rr_new_arrival_runs_before_preempted_process():
    procs = [
        Process(1, "A", arrival_time=0, burst_time=4),
        Process(2, "B", arrival_time=2, burst_time=2),
    ]
    res = run_round_robin(procs, quantum=2)
    assert [s.name for s in res.timeline] == ["A", "B", "A"]
    assert res.completion_order == ["B", "A"]


def test_rr_idle_and_requeue_onto_empty_queue():
    procs = [
        Process(1, "A", arrival_time=0, burst_time=2),
        Process(2, "B", arrival_time=5, burst_time=3),
    ]
    res = run_round_robin(procs, quantum=2)
    assert [(s.name, s.start_time, s.end_time) for s in res.timeline] == [
        ("A", 0, 2),
        ("B", 5, 7),
        ("B", 7, 8),
    ]
    assert _by_name(res)["B"].waiting_time == 0


def test_rr_large_quantum_matches_fcfs():
    rr = run_round_robin(_procs(), quantum=100)
    fcfs = run_fcfs(_procs())
    assert [(p.name, p.completion_time) for p in rr.processes] == [
        (p.name, p.completion_time) for p in fcfs.processes
    ]


@pytest.mark.parametrize("quantum", [1, 2, 3, 4])
def test_rr_slices_never_exceed_quantum(quantum):
    res = run_round_robin(_procs(), quantum=quantum)
    for proc in _procs():
        lengths = [s.length for s in res.timeline if s.pid == proc.pid]
        assert sum(lengths) == proc.burst_time
        assert all(length == quantum for length in lengths[:-1])
        assert 0 < lengths[-1] <= quantum


WORKLOADS = [
    _procs(),
    [
        Process(1, "A", arrival_time=4, burst_time=3),
        Process(2, "B", arrival_time=0, burst_time=7),
        Process(3, "C", arrival_time=4, burst_time=1),
        Process(4, "D", arrival_time=20, burst_time=2),
        Process(5, "E", arrival_time=1, burst_time=4),
    ],
    [Process(7, "solo", arrival_time=9, burst_time=4)],
]


@pytest.mark.parametrize("workload", WORKLOADS)
@pytest.mark.parametrize("name,quantum", [("fcfs", None), ("sjf", None), ("rr", 1), ("rr", 2), ("rr", 3)])
def test_metric_invariants(workload, name, quantum):
    res = run_algorithm(name, workload, quantum=quantum)

    assert len(res.processes) == len(workload)
    for p in res.processes:
        assert p.turnaround_time == p.completion_time - p.arrival_time
        assert p.waiting_time == p.turnaround_time - p.burst_time
        assert p.waiting_time >= 0
        assert p.remaining_time == 0

    slices = sorted(res.timeline, key=lambda s: s.start_time)
    for prev, nxt in zip(slices, slices[1:]):
        assert prev.end_time <= nxt.start_time

    makespan = max(p.completion_time for p in res.processes)
    assert res.system.makespan == makespan
    assert res.system.cpu_busy_time == sum(p.burst_time for p in workload)
    assert res.system.cpu_busy_time <= makespan


def test_runs_do_not_touch_caller_processes():
    base = _procs()
    run_round_robin(base, quantum=2)
    run_sjf(base)
    assert all(p.remaining_time == p.burst_time for p in base)
    assert all(p.completion_time is None and p.waiting_time is None for p in base)


def test_repeated_runs_are_identical():
    base = _procs()
    first = run_round_robin(base, quantum=2)
    second = run_round_robin(base, quantum=2)
    assert first.processes == second.processes
    assert first.timeline == second.timeline
    assert first.processes[0] is not second.processes[0]


def test_simulate_with_policy_objects():
    res = simulate(_procs(), SJF())
    assert res.completion_order == ["P1", "P2", "P4", "P3"]
    assert simulate(_procs(), RoundRobin(2)).avg_waiting_time == pytest.approx(9.75)


@pytest.mark.parametrize("runner", [run_fcfs, run_sjf, lambda procs: run_round_robin(procs, 2)])
def test_empty_input_rejected(runner):
    with pytest.raises(InvalidInputError):
        runner([])


@pytest.mark.parametrize("quantum", [0, -1, -5])
def test_rr_non_positive_quantum_rejected(quantum):
    with pytest.raises(InvalidParameterError):
        run_round_robin(_procs(), quantum=quantum)


@pytest.mark.parametrize("quantum", [2.5, True, "2"])
def test_rr_non_integer_quantum_rejected(quantum):
    with pytest.raises(InvalidParameterError):
        run_round_robin(_procs(), quantum=quantum)


@pytest.mark.parametrize(
    "bad",
    [
        Process(2, "dup", arrival_time=0, burst_time=1),
        Process(9, "zero-burst", arrival_time=0, burst_time=0),
        Process(9, "negative-arrival", arrival_time=-1, burst_time=2),
        Process(9, "", arrival_time=0, burst_time=2),
        Process(0, "zero-pid", arrival_time=0, burst_time=2),
    ],
)
def test_invalid_process_rejected(bad):
    with pytest.raises(InvalidInputError):
        run_fcfs(_procs() + [bad])


def test_input_errors_are_value_errors():
    with pytest.raises(ValueError):
        run_sjf([])
    with pytest.raises(ValueError):
        run_round_robin(_procs(), quantum=0)


def test_run_algorithm_dispatch():
    assert run_algorithm("FCFS", _procs()).avg_waiting_time == pytest.approx(5.75)
    assert run_algorithm("rr", _procs(), quantum=2).completion_order == ["P2", "P1", "P4", "P3"]

    with pytest.raises(InvalidParameterError):
        run_algorithm("priority", _procs())
    with pytest.raises(InvalidParameterError):
        run_algorithm("rr", _procs())
