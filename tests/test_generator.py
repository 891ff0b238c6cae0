import numpy as np
from PIL import Image

from noise_patterns import generator
from noise_patterns.metrics import intensity_stats, is_grayscale


class QueueRng:
    """Random source replaying fixed batches, to pin Box-Muller inputs."""

    def __init__(self, *batches):
        self.batches = [np.array(b, dtype=np.float64) for b in batches]
        self.requests = []

    def random(self, n):
        self.requests.append(n)
        batch = self.batches.pop(0)
        assert len(batch) == n
        return batch


def test_pattern_shape_and_grayscale():
    pixels = generator.noise_pattern(128, 20, rng=np.random.default_rng(1))
    assert pixels.shape == (generator.CANVAS_SIZE, generator.CANVAS_SIZE, 4)
    assert pixels.dtype == np.uint8
    assert is_grayscale(pixels)
    assert (pixels[..., 3] == 255).all()


def test_statistical_shape():
    pixels = generator.noise_pattern(128, 20, rng=np.random.default_rng(1234))
    s = intensity_stats(pixels)
    assert abs(s["mean"] - 128) <= 3
    assert abs(s["std_dev"] - 20) <= 1.5
    assert s["clipped"] < 0.001


def test_values_are_clamped():
    dark = generator.generate_pixels(64, 64, 0, 50, rng=np.random.default_rng(7))
    bright = generator.generate_pixels(64, 64, 255, 50, rng=np.random.default_rng(7))
    assert dark[..., 0].min() == 0
    assert bright[..., 0].max() == 255
    # Roughly half of each buffer sits on the clamp boundary
    assert 0.4 < intensity_stats(dark)["clipped"] < 0.6


def test_opacity_sets_alpha():
    rng = np.random.default_rng(3)
    assert (generator.generate_pixels(4, 4, 128, 20, opacity=0, rng=rng)[..., 3] == 0).all()
    assert (generator.generate_pixels(4, 4, 128, 20, opacity=50, rng=rng)[..., 3] == 128).all()
    assert (generator.generate_pixels(4, 4, 128, 20, opacity=100, rng=rng)[..., 3] == 255).all()


def test_zero_uniform_samples_are_redrawn():
    # u = [0, .5] -> first entry redrawn as .25; v = [.5, .5] -> cos(pi) = -1
    rng = QueueRng([0.0, 0.5], [0.25], [0.5, 0.5])
    pixels = generator.generate_pixels(2, 1, 100, 10, rng=rng)
    assert rng.requests == [2, 1, 2]
    # Z = -sqrt(-2 ln .25) = -1.665..., -sqrt(-2 ln .5) = -1.177...
    assert pixels[0, :, 0].tolist() == [83, 88]


def test_non_square_buffer_layout():
    pixels = generator.generate_pixels(3, 5, 128, 0, rng=np.random.default_rng(0))
    assert pixels.shape == (5, 3, 4)
    # Zero deviation gives exactly the mean everywhere
    assert (pixels[..., 0] == 128).all()


def test_encode_png(tmp_path):
    pixels = generator.noise_pattern(128, 20, opacity=40, rng=np.random.default_rng(5))
    path = generator.encode_png(pixels, tmp_path / "noise.png")
    with Image.open(path) as im:
        assert im.format == "PNG"
        assert im.mode == "LA"
        assert im.size == (256, 256)
    loaded = generator.load_pixels(path)
    assert loaded.shape == (256, 256, 4)
    assert (loaded[..., 0] == pixels[..., 0]).all()
    assert (loaded[..., 3] == 102).all()
