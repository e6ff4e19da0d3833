import unittest

from app.services import display_text
from app.services.layer_status_machine import LayerStatus
from core.runtime_client import DisplayResolution


class DisplayTextTests(unittest.TestCase):
    def test_resolution_label(self):
        self.assertEqual(
            display_text.resolution_text(DisplayResolution(2016, 2224)),
            "OpenXR resolution: 2016 x 2224",
        )

    def test_headset_off_label(self):
        for resolution in (None, DisplayResolution(0, 2224), DisplayResolution(2016, 0)):
            with self.subTest(resolution=resolution):
                self.assertEqual(
                    display_text.resolution_text(resolution),
                    "OpenXR resolution: Please turn on headset",
                )

    def test_scaling_label_uses_integer_math(self):
        self.assertEqual(display_text.scaling_text(80, DisplayResolution(2016, 2224)), "80%\n1612 x 1779")
        self.assertEqual(display_text.scaling_text(80, None), "80%")
        self.assertEqual(display_text.scaling_text(65, DisplayResolution(0, 100)), "65%")

    def test_status_and_tooltip(self):
        text, _color = display_text.layer_status_text(LayerStatus.INACTIVE)
        self.assertEqual(text, "NIS Scaler layer is NOT active")
        self.assertEqual(display_text.layer_tooltip(frozenset()), "No API layers are active")
        self.assertEqual(display_text.layer_tooltip({"b", "a"}), "a\nb")
