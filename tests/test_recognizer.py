"""
Tests for the recognizer entry points and the full pipeline.

The region detector and the OCR engine are stubbed, except for the last
scenario which needs a real tesseract install.
"""

import shutil
from pathlib import Path

import cv2
import numpy as np
import pytest
from PIL import Image

from text_recognizer import (
    ClassifierPaths,
    InitializationError,
    InputError,
    ProcessingError,
    RecognitionError,
    Recognizer,
    RecognizerConfig,
    Rectangle,
)
from text_recognizer.ocr.region_detector import RegionDetector


class StubDetector:
    """Returns fixed boxes and remembers what it was asked to look at."""

    def __init__(self, boxes=None, error=None):
        self.boxes = list(boxes or [])
        self.error = error
        self.images = []

    def detect(self, image):
        self.images.append(image)
        if self.error:
            raise self.error
        return list(self.boxes)


class ScriptedEngine:
    """OCR engine returning one scripted text per area."""

    instances = []

    def __init__(self, texts):
        self.texts = list(texts)
        self.areas = []
        self.ended = False
        ScriptedEngine.instances.append(self)

    def init(self, language):
        self.language = language

    def set_image(self, data, width, height, channels, stride):
        self.areas.append((width, height, channels))

    def recognize(self):
        return True

    def get_text(self):
        return self.texts[len(self.areas) - 1]

    def clear(self):
        pass

    def end(self):
        self.ended = True


def word_image():
    """White 400x120 image with two dark words, plus tight boxes around them."""
    image = np.full((120, 400, 3), 255, dtype=np.uint8)
    font = cv2.FONT_HERSHEY_SIMPLEX
    boxes = []
    for word, x in (("Hello", 20), ("World", 220)):
        (w, h), baseline = cv2.getTextSize(word, font, 1.5, 3)
        cv2.putText(image, word, (x, 80), font, 1.5, (0, 0, 0), 3)
        boxes.append(Rectangle(x - 8, 80 - h - 8, w + 16, h + baseline + 16))
    return image, boxes


class TestInputErrors:
    """Tests for rejected inputs."""

    def setup_method(self):
        self.recognizer = Recognizer(detector=StubDetector())

    def test_empty_path(self):
        with pytest.raises(InputError, match="bad file name"):
            self.recognizer.get_text("")

    def test_empty_path_object(self):
        with pytest.raises(InputError, match="bad file name"):
            self.recognizer.get_text(Path(""))

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputError, match="failed to load image"):
            self.recognizer.get_text(tmp_path / "missing.png")

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "garbage.png"
        path.write_bytes(b"not an image")
        with pytest.raises(InputError):
            self.recognizer.get_text(str(path))

    def test_empty_image(self):
        with pytest.raises(InputError):
            self.recognizer.get_text(np.zeros((0, 0, 3), dtype=np.uint8))

    def test_none_image(self):
        with pytest.raises(InputError):
            self.recognizer.get_text_from_image(None)

    def test_wrong_dtype(self):
        with pytest.raises(InputError):
            self.recognizer.get_text(np.zeros((10, 10), dtype=np.float32))

    @pytest.mark.parametrize("channels", [2, 5])
    def test_unsupported_channel_count(self, channels):
        recognizer = Recognizer(detector=StubDetector([Rectangle(0, 0, 2, 2)]))
        with pytest.raises(InputError, match=f"unsupported {channels}-channel image"):
            recognizer.get_text(np.zeros((10, 10, channels), dtype=np.uint8))

    def test_single_channel_3d_image_accepted(self):
        recognizer = Recognizer(
            detector=StubDetector([Rectangle(0, 0, 2, 2)]),
            engine_factory=lambda: ScriptedEngine(["ok"]),
        )
        assert recognizer.get_text(np.zeros((10, 10, 1), dtype=np.uint8)) == "ok "

    def test_unsupported_source(self):
        with pytest.raises(InputError):
            self.recognizer.get_text(42)

    def test_input_error_is_recognition_error(self):
        with pytest.raises(RecognitionError):
            self.recognizer.get_text("")


class TestPipeline:
    """Tests for the pipeline with stubbed engines."""

    def setup_method(self):
        ScriptedEngine.instances = []
        self.image, self.boxes = word_image()

    def make(self, boxes, texts, **config):
        return Recognizer(
            config=RecognizerConfig(**config),
            detector=StubDetector(boxes),
            engine_factory=lambda: ScriptedEngine(texts),
        )

    def test_no_detection_gives_empty_result(self):
        recognizer = self.make([], ["never used"])
        assert recognizer.get_text(self.image) == ""
        assert ScriptedEngine.instances == []

    def test_two_words(self):
        recognizer = self.make(self.boxes, ["Hello\n", "World\x0c"])
        assert recognizer.get_text(self.image) == "Hello World "

        engine = ScriptedEngine.instances[0]
        assert engine.language == 'eng'
        assert engine.ended
        # Per-box strategy: one binarized crop per box
        assert engine.areas == [(b.width, b.height, 1) for b in self.boxes]

    def test_duplicate_boxes_read_once(self):
        boxes = self.boxes + [self.boxes[0], Rectangle(30, 60, 10, 10)]
        recognizer = self.make(boxes, ["Hello", "World"])
        assert recognizer.get_text(self.image) == "Hello World "
        assert len(ScriptedEngine.instances[0].areas) == 2

    def test_dense_boxes_read_whole_image(self):
        boxes = [Rectangle(0, 0, 400, 60), Rectangle(0, 60, 400, 60)]
        recognizer = self.make(boxes, ["Hello World"])
        assert recognizer.get_text(self.image) == "Hello World "
        assert ScriptedEngine.instances[0].areas == [(400, 120, 1)]

    def test_empty_fragments_dropped(self):
        recognizer = self.make(self.boxes, ["\x01\x02", "World"])
        assert recognizer.get_text(self.image) == "World "

    def test_word_deduplication(self):
        recognizer = self.make(self.boxes, ["Hello World", "World"], deduplicate_words=True)
        assert recognizer.get_text(self.image) == "Hello World "

    def test_gray_image_accepted(self):
        gray = cv2.cvtColor(self.image, cv2.COLOR_BGR2GRAY)
        recognizer = self.make(self.boxes, ["Hello", "World"])
        assert recognizer.get_text(gray) == "Hello World "

    def test_pil_image_converted_to_bgr(self):
        detector = StubDetector(self.boxes)
        recognizer = Recognizer(
            detector=detector,
            engine_factory=lambda: ScriptedEngine(["a", "b"]),
        )
        rgb = np.zeros((10, 10, 3), dtype=np.uint8)
        rgb[:, :, 0] = 255   # red in RGB
        recognizer.get_text(Image.fromarray(rgb))
        assert detector.images[0][0, 0].tolist() == [0, 0, 255]

    def test_file_source(self, tmp_path):
        path = tmp_path / "words.png"
        cv2.imwrite(str(path), self.image)
        recognizer = self.make(self.boxes, ["Hello", "World"])
        assert recognizer.get_text(str(path)) == "Hello World "
        assert recognizer.get_text(path) == "Hello World "

    def test_detector_error_propagates(self):
        error = ProcessingError("OpenCV(4.9.0) error: bad channel")
        recognizer = Recognizer(detector=StubDetector(error=error))
        with pytest.raises(ProcessingError, match="bad channel"):
            recognizer.get_text(self.image)

    def test_engine_init_error_propagates(self):
        class BrokenEngine(ScriptedEngine):
            def init(self, language):
                raise InitializationError("could not initialize tesseract ocr")

        recognizer = Recognizer(
            detector=StubDetector(self.boxes),
            engine_factory=lambda: BrokenEngine([]),
        )
        with pytest.raises(InitializationError):
            recognizer.get_text(self.image)

    def test_each_call_gets_own_session(self):
        recognizer = self.make(self.boxes, ["Hello", "World"])
        recognizer.get_text(self.image)
        recognizer.get_text(self.image)
        assert len(ScriptedEngine.instances) == 2
        assert all(engine.ended for engine in ScriptedEngine.instances)


class TestClassifierConfiguration:
    """Tests for per-instance classifier configuration."""

    def test_defaults(self):
        recognizer = Recognizer()
        assert recognizer.config.classifiers == ClassifierPaths()
        assert isinstance(recognizer.detector, RegionDetector)
        assert recognizer.detector.classifiers.nm1 == 'trained_classifierNM1.xml'

    def test_set_classifiers_rebuilds_own_detector(self):
        recognizer = Recognizer()
        recognizer.set_classifiers('a.xml', 'b.xml', 'c.xml')
        assert recognizer.detector.classifiers == ClassifierPaths('a.xml', 'b.xml', 'c.xml')

    def test_instances_do_not_interfere(self):
        first = Recognizer()
        second = Recognizer()
        first.set_classifiers('a.xml', 'b.xml', 'c.xml')
        assert second.config.classifiers == ClassifierPaths()

    def test_injected_detector_kept(self):
        detector = StubDetector()
        recognizer = Recognizer(detector=detector)
        recognizer.set_classifiers('a.xml', 'b.xml', 'c.xml')
        assert recognizer.detector is detector
        assert recognizer.config.classifiers.grouping == 'c.xml'

    def test_missing_classifier_file(self, tmp_path):
        config = RecognizerConfig(classifiers=ClassifierPaths().resolve(tmp_path))
        recognizer = Recognizer(config)
        with pytest.raises(InitializationError, match="classifier file not found"):
            recognizer.get_text(np.full((20, 20, 3), 255, dtype=np.uint8))

    def test_resolve_keeps_absolute(self, tmp_path):
        absolute = str(tmp_path / "nm1.xml")
        paths = ClassifierPaths(nm1=absolute).resolve("/models")
        assert paths.nm1 == absolute
        assert paths.nm2.endswith("trained_classifierNM2.xml")
        assert paths.nm2.startswith("/models")

    def test_config_to_dict(self):
        data = RecognizerConfig().to_dict()
        assert data['language'] == 'eng'
        assert data['tesseract_config'] == '--psm 6'
        assert data['whole_image_coverage'] == 0.5
        assert data['classifiers']['grouping'] == 'trained_classifier_erGrouping.xml'
        assert data['detector']['threshold_delta'] == 16


@pytest.mark.skipif(shutil.which('tesseract') is None, reason="tesseract not installed")
class TestEndToEnd:
    """Real Tesseract over a synthetic two-word image."""

    def test_two_words_recognized(self):
        image, boxes = word_image()
        recognizer = Recognizer(
            detector=StubDetector(boxes),
        )
        result = recognizer.get_text(image)

        assert "Hello" in result
        assert "World" in result
        assert result.index("Hello") < result.index("World")
        assert all(c.isprintable() for c in result)
