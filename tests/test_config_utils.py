from __future__ import annotations

import copy
import json
from pathlib import Path
import tempfile
import unittest

from form_coach.exercise_analysis import EXERCISE_ANALYZER_REGISTRY, ExerciseVariant, create_analyzer
from form_coach.exercise_analysis.config_utils import (
    AngleRange,
    get_min_confidence,
    get_variant_config,
    load_exercise_config,
    parse_angle_ranges,
)


class AngleRangeTests(unittest.TestCase):
    def test_bounds_are_inclusive(self) -> None:
        stand = AngleRange(160, 190)
        self.assertIn(160, stand)
        self.assertIn(190, stand)
        self.assertNotIn(159, stand)
        self.assertNotIn(191, stand)

    def test_missing_angle_is_never_in_range(self) -> None:
        self.assertNotIn(None, AngleRange(0, 180))

    def test_inverted_range_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            AngleRange(100, 20)


class ExerciseConfigTests(unittest.TestCase):
    def test_bundled_config_thresholds(self) -> None:
        config = load_exercise_config()
        self.assertEqual(get_min_confidence(config), 0.65)
        self.assertEqual(config["model_input"], {"width": 257, "height": 257})

        front = parse_angle_ranges(get_variant_config(config, "squat_front")["angle_ranges"])
        self.assertEqual(front["squat_knee"], AngleRange(20, 100))
        self.assertEqual(front["stand_knee"], AngleRange(160, 190))

        side = parse_angle_ranges(get_variant_config(config, "squat_side")["angle_ranges"])
        self.assertEqual(side["knee_ankle"], AngleRange(40, 105))
        self.assertEqual(side["torso"], AngleRange(35, 200))

        plank = parse_angle_ranges(get_variant_config(config, "plank")["angle_ranges"])
        self.assertEqual(plank["arm"], AngleRange(60, 110))
        self.assertEqual(plank["hip"], AngleRange(140, 180))

    def test_load_from_custom_path(self) -> None:
        config = copy.deepcopy(load_exercise_config())
        config["min_confidence"] = 0.5
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "exercise_config.json"
            path.write_text(json.dumps(config), encoding="utf-8")
            loaded = load_exercise_config(str(path))
        self.assertEqual(get_min_confidence(loaded), 0.5)
        self.assertEqual(get_min_confidence(loaded, 0.8), 0.8)

    def test_malformed_range_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            parse_angle_ranges({"arm": [60]})

    def test_unknown_variant_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            get_variant_config(load_exercise_config(), "pullup")


class AnalyzerRegistryTests(unittest.TestCase):
    def test_every_variant_is_registered(self) -> None:
        self.assertEqual(set(EXERCISE_ANALYZER_REGISTRY), set(ExerciseVariant))
        for variant in ExerciseVariant:
            self.assertEqual(create_analyzer(variant).get_exercise_name(), variant.value)

    def test_unknown_exercise_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            create_analyzer("pushup")

    def test_config_missing_required_range_is_rejected(self) -> None:
        config = copy.deepcopy(load_exercise_config())
        del config["variants"]["plank"]["angle_ranges"]["hip"]
        with self.assertRaises(ValueError):
            create_analyzer(ExerciseVariant.PLANK, config=config)

    def test_min_confidence_override(self) -> None:
        analyzer = create_analyzer("squat_front", min_confidence=0.3)
        self.assertEqual(analyzer.min_confidence, 0.3)

    def test_sessions_do_not_share_counters(self) -> None:
        first = create_analyzer("squat_side")
        first.state.rep_count = 4
        self.assertEqual(create_analyzer("squat_side").state.rep_count, 0)


if __name__ == "__main__":
    unittest.main()
