import pytest
import torch

import main
from backends import torch_backend


def test_benchmark_sweep_on_cpu(capsys):
    main.main([
        "--roots", "0", "2", "6",
        "--sizes", "1000", "20000",
        "--backend", "torch",
        "--workers", "2",
        "--seed", "1",
    ])
    out = capsys.readouterr().out

    assert "x_min: -1, x_max: 7, y_min: -21, y_max: 35" in out
    assert out.count("Paralel code with") == 2
    assert out.count("Not paralel code with") == 2
    assert out.count("Definite integral =") == 4
    assert "Elapsed time =" in out


def test_sequential_runs_every_size_by_default(capsys):
    main.main(["--sizes", "1000", "5000", "--backend", "torch", "--workers", "2"])
    out = capsys.readouterr().out

    assert "a: 0, b: 2, c: 6" in out
    assert out.count("Not paralel code with") == 2


def test_default_sweep_has_no_sequential_cap():
    args = main.parse_args([])

    assert args.sequential_max is None
    assert args.sizes[-1] == 10**9


def test_sequential_max_skips_large_runs(capsys):
    main.main(["--sizes", "1000", "5000", "--backend", "torch", "--sequential-max", "1000"])
    out = capsys.readouterr().out

    assert out.count("Paralel code with") == 2
    assert out.count("Not paralel code with") == 1


def test_build_failure_prints_log_and_exits(monkeypatch, capsys):
    def broken_worker(*args, **kwargs):
        raise RuntimeError("bad op")

    monkeypatch.setattr(torch_backend, "sample_worker", broken_worker)

    with pytest.raises(SystemExit) as exc:
        main.main(["--sizes", "1000", "--backend", "torch"])
    out = capsys.readouterr().out

    assert exc.value.code == 1
    assert "--- build log ---" in out
    assert "bad op" in out


@pytest.mark.skipif(torch.cuda.is_available(), reason="Checks the no-GPU error path")
def test_missing_gpu_exits_nonzero(capsys):
    with pytest.raises(SystemExit) as exc:
        main.main(["--sizes", "1000", "--backend", "triton"])

    assert exc.value.code == 1
    assert "[Error]" in capsys.readouterr().out
