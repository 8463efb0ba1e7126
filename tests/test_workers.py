"""
Test script for the export/preview workers and the command line.

Run with: python -m pytest tests/test_workers.py -v
Or simply: python tests/test_workers.py
"""

import shutil
import sys
import tempfile
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
from PIL import Image

from PyQt6.QtCore import QCoreApplication, QEventLoop, QTimer

from photomark.core.spec import WatermarkKind, WatermarkSpec
from photomark.workers import (
    ExportWorker, ExportConfig, ExportResult, ExportError, export_images,
    PreviewWorker, make_proxy, render_preview, scale_spec
)
import main as cli

# Global QCoreApplication instance
_app = None


def get_app():
    """Get or create the Qt application instance."""
    global _app
    if _app is None:
        _app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    return _app


def create_test_image(path: Path, width: int = 400, height: int = 300) -> Path:
    """Write a gradient test image."""
    arr = np.zeros((height, width, 3), dtype=np.uint8)
    arr[..., 0] = np.linspace(0, 255, width, dtype=np.uint8)[np.newaxis, :]
    arr[..., 1] = np.linspace(0, 255, height, dtype=np.uint8)[:, np.newaxis]
    arr[..., 2] = 128
    Image.fromarray(arr, mode="RGB").save(path)
    return path


def wait_for_signal(signal, start=None, timeout_ms: int = 30000):
    """
    Wait for a Qt signal with timeout.

    `start` is called after connecting, so a worker that finishes
    immediately cannot emit before anyone is listening.

    Returns:
        The value emitted by the signal, or None if timeout.
    """
    get_app()
    loop = QEventLoop()
    result = [None]

    def on_signal(*args):
        result[0] = args[0] if len(args) == 1 else args
        loop.quit()

    signal.connect(on_signal)
    if start is not None:
        start()

    timer = QTimer()
    timer.setSingleShot(True)
    timer.timeout.connect(loop.quit)
    timer.start(timeout_ms)

    loop.exec()
    timer.stop()

    return result[0]


class _TempDir:
    def __enter__(self) -> Path:
        self.path = Path(tempfile.mkdtemp())
        return self.path

    def __exit__(self, *exc):
        shutil.rmtree(self.path, ignore_errors=True)


# ===== Package =====

def test_package_root_exposes_workers():
    import photomark
    assert photomark.ExportWorker is ExportWorker
    assert photomark.PreviewWorker is PreviewWorker
    try:
        photomark.NoSuchWorker
    except AttributeError:
        return
    raise AssertionError("Unknown names should raise AttributeError")


# ===== export_images =====

def test_export_images_writes_named_outputs():
    print("\n" + "=" * 50)
    print("Testing export_images")
    print("=" * 50)

    with _TempDir() as tmp:
        sources = [create_test_image(tmp / "one.png"), create_test_image(tmp / "two.bmp", 200, 100)]
        config = ExportConfig(
            image_paths=sources,
            output_dir=tmp / "out",
            spec=WatermarkSpec(text="TEST"),
            output_format="jpeg",
            quality=80,
            prefix="wm_",
            suffix="_x",
        )

        progress_log = []
        results = export_images(config, lambda c, t, f: progress_log.append((c, t, f)))

        assert progress_log == [(1, 2, "one.png"), (2, 2, "two.bmp")]
        assert [r.output_path.name for r in results] == ["wm_one_x.jpg", "wm_two_x.jpg"]
        assert all(r.success for r in results)
        with Image.open(results[1].output_path) as img:
            assert img.size == (200, 100)
            assert img.format == "JPEG"
        print(f"✅ Exported {len(results)} images")


def test_export_images_scale_and_png():
    with _TempDir() as tmp:
        source = create_test_image(tmp / "photo.jpg")
        config = ExportConfig(
            image_paths=[source],
            output_dir=tmp / "out",
            output_format="png",
            prefix="",
            scale_percent=50,
        )
        (result,) = export_images(config)

        assert result.output_path.name == "photo.png"
        with Image.open(result.output_path) as img:
            assert img.size == (200, 150)
            assert img.format == "PNG"


def test_export_images_stops_at_first_failure():
    """A bad source aborts the batch; later images are not written."""
    with _TempDir() as tmp:
        good = create_test_image(tmp / "a.png")
        bad = tmp / "b.png"
        bad.write_bytes(b"broken")
        later = create_test_image(tmp / "c.png")

        config = ExportConfig(image_paths=[good, bad, later], output_dir=tmp / "out")
        try:
            export_images(config)
        except ExportError as e:
            assert e.source_path == bad
        else:
            raise AssertionError("Expected ExportError")

        written = sorted(p.name for p in (tmp / "out").iterdir())
        assert written == ["wm_a.jpg"]


def test_export_images_missing_watermark_asset_still_exports():
    with _TempDir() as tmp:
        source = create_test_image(tmp / "a.png")
        spec = WatermarkSpec(kind=WatermarkKind.IMAGE, image_path=str(tmp / "nope.png"))
        config = ExportConfig(image_paths=[source], output_dir=tmp / "out",
                              spec=spec, output_format="png", prefix="")

        (result,) = export_images(config)
        with Image.open(source) as original, Image.open(result.output_path) as exported:
            assert np.array_equal(np.asarray(original.convert("RGB")),
                                  np.asarray(exported.convert("RGB")))


# ===== ExportWorker =====

def test_export_worker_success():
    print("\n" + "=" * 50)
    print("Testing ExportWorker")
    print("=" * 50)

    get_app()
    with _TempDir() as tmp:
        sources = [create_test_image(tmp / f"img_{i}.png") for i in range(3)]
        config = ExportConfig(image_paths=sources, output_dir=tmp / "out")

        worker = ExportWorker(config)
        progress_log = []
        errors = []
        worker.progress.connect(lambda c, t, f: progress_log.append((c, t, f)))
        worker.error.connect(errors.append)

        results = wait_for_signal(worker.finished_all, worker.start)
        worker.wait()

        assert results is not None, "Worker timed out"
        assert len(results) == 3
        assert all(isinstance(r, ExportResult) and r.success for r in results)
        assert [c for c, _, _ in progress_log] == [1, 2, 3]
        assert errors == []
        print(f"✅ Worker exported {len(results)} images")


def test_export_worker_fail_fast():
    get_app()
    with _TempDir() as tmp:
        missing = tmp / "missing.png"
        later = create_test_image(tmp / "later.png")
        config = ExportConfig(image_paths=[missing, later], output_dir=tmp / "out")

        worker = ExportWorker(config)
        errors = []
        worker.error.connect(errors.append)

        results = wait_for_signal(worker.finished_all, worker.start)
        worker.wait()

        assert results is not None, "Worker timed out"
        assert len(results) == 1
        assert not results[0].success
        assert len(errors) == 1 and "missing.png" in errors[0]
        assert not (tmp / "out" / "wm_later.jpg").exists()


def test_export_worker_no_images():
    get_app()
    worker = ExportWorker(ExportConfig(image_paths=[]))
    errors = []
    worker.error.connect(errors.append)

    results = wait_for_signal(worker.finished_all, worker.start)
    worker.wait()

    assert results == []
    assert errors == ["No images to export"]


# ===== Preview =====

def test_make_proxy_and_scale_spec():
    big = Image.new("RGB", (1600, 1200))
    proxy, ratio = make_proxy(big, 800)
    assert proxy.size == (800, 600)
    assert ratio == 0.5

    small = Image.new("RGB", (300, 200))
    proxy, ratio = make_proxy(small, 800)
    assert proxy.size == (300, 200) and ratio == 1.0

    spec = scale_spec(WatermarkSpec(font_size=52, offset_x=20, offset_y=-10), 0.5)
    assert (spec.font_size, spec.offset_x, spec.offset_y) == (26, 10, -5)


def test_render_preview_size():
    preview = render_preview(Image.new("RGB", (2000, 1000)), WatermarkSpec(), max_size=500)
    assert preview.size == (500, 250)


def test_preview_worker():
    get_app()
    with _TempDir() as tmp:
        source = create_test_image(tmp / "big.png", 1200, 900)
        worker = PreviewWorker(source, WatermarkSpec(), max_size=600)

        preview = wait_for_signal(worker.preview_ready, worker.start)
        worker.wait()

        assert preview is not None, "Worker timed out"
        assert preview.size == (600, 450)


def test_preview_worker_error():
    get_app()
    with _TempDir() as tmp:
        worker = PreviewWorker(tmp / "missing.png", WatermarkSpec())

        message = wait_for_signal(worker.preview_error, worker.start)
        worker.wait()

        assert message is not None and "Failed to load image" in message


# ===== Command line =====

def test_cli_export():
    with _TempDir() as tmp:
        create_test_image(tmp / "a.png")
        create_test_image(tmp / "b.png")
        out = tmp / "out"

        code = cli.main(["export", str(tmp), "-o", str(out), "--text", "CLI",
                         "--position", "center", "--format", "png", "--color", "#ff000080"])

        assert code == 0
        assert sorted(p.name for p in out.iterdir()) == ["wm_a.png", "wm_b.png"]


def test_cli_export_unknown_template():
    with _TempDir() as tmp:
        create_test_image(tmp / "a.png")
        templates = tmp / "templates.json"
        templates.write_text('{"Default": {"Text": "T"}}', encoding="utf-8")

        code = cli.main(["export", str(tmp / "a.png"), "-o", str(tmp / "out"),
                         "--template", str(templates), "--template-name", "Other"])
        assert code == 2


def test_cli_resolve_spec_overrides_template():
    with _TempDir() as tmp:
        templates = tmp / "templates.json"
        templates.write_text(
            '{"Default": {"Text": "T", "FontSize": 20, "Position": "top-left", "Opacity": 50}}',
            encoding="utf-8",
        )
        args = cli.build_parser().parse_args(
            ["export", "x.png", "-o", "out", "--template", str(templates), "--opacity", "150"]
        )
        spec = cli.resolve_spec(args)

        assert spec.text == "T"
        assert spec.font_size == 20
        assert spec.position == "top-left"
        assert spec.opacity == 100


def main():
    """Run all tests."""
    print("🧪 Photomark Worker Tests")
    get_app()
    tests = [obj for name, obj in sorted(globals().items()) if name.startswith("test_")]
    for test in tests:
        test()
    print(f"\nTotal: {len(tests)} tests passed")


if __name__ == "__main__":
    main()
