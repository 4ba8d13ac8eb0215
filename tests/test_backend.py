"""Unit tests for render backend selection.

Taichi is never re-initialized here: init_taichi is replaced by a recorder so
the session runtime set up in conftest.py stays valid.
"""

import pytest
import taichi as ti


@pytest.fixture
def init_calls(monkeypatch):
    """Record the arch of each init_taichi call made by init_render_backend."""
    import pathtracer

    calls = []

    def fake_init(arch=None, random_seed=0):
        calls.append(arch)

    monkeypatch.setattr(pathtracer, "init_taichi", fake_init)
    return calls


class TestInitRenderBackend:
    """Tests for init_render_backend."""

    def test_cpu_requested(self, init_calls):
        from pathtracer import init_render_backend

        assert init_render_backend(use_gpu=False, random_seed=3) == "CPU"
        assert init_calls == [ti.cpu]

    def test_cuda_available(self, init_calls, monkeypatch):
        import pathtracer

        monkeypatch.setattr(pathtracer, "_current_arch", lambda: ti.cuda)

        assert pathtracer.init_render_backend() == "GPU"
        assert init_calls == [ti.cuda]

    def test_silent_cpu_fallback_is_reported(self, init_calls, monkeypatch):
        """Test a CUDA request that Taichi quietly served on the CPU reports CPU."""
        import pathtracer

        monkeypatch.setattr(pathtracer, "_current_arch", lambda: ti.x64)

        assert pathtracer.init_render_backend() == "CPU"
        assert init_calls == [ti.cuda]

    def test_failed_cuda_init_falls_back_to_cpu(self, monkeypatch):
        import pathtracer

        calls = []

        def failing_init(arch=None, random_seed=0):
            calls.append(arch)
            if arch == ti.cuda:
                raise RuntimeError("no CUDA device")

        monkeypatch.setattr(pathtracer, "init_taichi", failing_init)
        monkeypatch.setattr(pathtracer, "_current_arch", lambda: ti.x64)

        assert pathtracer.init_render_backend() == "CPU"
        assert calls == [ti.cuda, ti.cpu]

    def test_never_picks_backends_without_f64(self, init_calls, monkeypatch):
        """Test Metal, OpenGL and Vulkan are never requested."""
        import pathtracer

        monkeypatch.setattr(pathtracer, "_current_arch", lambda: ti.x64)
        pathtracer.init_render_backend()

        assert ti.metal not in init_calls
        assert ti.opengl not in init_calls
        assert ti.vulkan not in init_calls
