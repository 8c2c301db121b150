import numpy as np

from planet_generator import color_maps


def test_band_classification():
    heights = np.array([9.0, 10.1, 10.3, 11.0, 11.5, 12.5])
    bands = color_maps.calculate_band_map(heights, radius=10.0)
    expected = [
        color_maps.BAND_ID_OCEAN,
        color_maps.BAND_ID_OCEAN,
        color_maps.BAND_ID_SAND,
        color_maps.BAND_ID_GRASS,
        color_maps.BAND_ID_ROCK,
        color_maps.BAND_ID_SNOW,
    ]
    np.testing.assert_array_equal(bands, expected)


def test_vertex_colors_from_lut():
    lut = color_maps.create_band_color_lut()
    assert lut.shape == (5, 3)
    assert lut.dtype == np.uint8

    bands = np.array([0, 4, 2], dtype=np.uint8)
    colors = color_maps.get_vertex_color_array(bands, lut)
    np.testing.assert_array_equal(colors[1], color_maps.COLOR_MAP_PLANET["snow"])


def test_face_colors_take_highest_band():
    lut = color_maps.create_band_color_lut()
    bands = np.array([0, 1, 3], dtype=np.uint8)
    faces = color_maps.get_face_color_array(bands, np.array([[0, 1, 2], [0, 0, 1]]), lut)
    np.testing.assert_array_equal(faces[0], color_maps.COLOR_MAP_PLANET["rock"])
    np.testing.assert_array_equal(faces[1], color_maps.COLOR_MAP_PLANET["sand"])


def test_band_histogram():
    counts = color_maps.band_histogram(np.array([0, 0, 2, 4], dtype=np.uint8))
    assert counts == {"ocean": 2, "sand": 0, "grass": 1, "rock": 0, "snow": 1}
