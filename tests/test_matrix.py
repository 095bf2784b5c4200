import pytest

from harness.browser.targets import BUILTIN_TARGETS, EngineKind, EngineTarget
from harness.core.matrix import EngineMatrix


@pytest.fixture
def matrix() -> EngineMatrix:
    return EngineMatrix()


def test_expand_one_run_per_target(matrix: EngineMatrix):
    targets = matrix.select(["chromium", "firefox", "webkit"])

    runs = EngineMatrix.expand(targets, "login")

    assert [(test_id, t.name) for test_id, t in runs] == [
        ("login", "chromium"),
        ("login", "firefox"),
        ("login", "webkit"),
    ]


def test_expand_drops_repeated_targets(matrix: EngineMatrix):
    targets = matrix.select(["webkit", "chromium", "webkit"])

    runs = EngineMatrix.expand(targets, "t")

    assert [t.name for _, t in runs] == ["webkit", "chromium"]


def test_expand_empty():
    assert EngineMatrix.expand([], "t") == []


def test_select_unknown_target(matrix: EngineMatrix):
    with pytest.raises(ValueError, match="netscape"):
        matrix.select(["chromium", "netscape"])


def test_register_custom_target(matrix: EngineMatrix):
    tablet = EngineTarget("tablet", "webkit", viewport=[820, 1180], is_mobile=True)
    matrix.register(tablet)

    assert matrix.select(["tablet"]) == [tablet]
    assert tablet.kind is EngineKind.WEBKIT
    assert tablet.viewport == (820, 1180)
    assert matrix.names()[: len(BUILTIN_TARGETS)] == [t.name for t in BUILTIN_TARGETS]


def test_invalid_viewport():
    with pytest.raises(ValueError):
        EngineTarget("broken", EngineKind.CHROMIUM, viewport=(0, 720))


def test_desktop_context_options():
    assert BUILTIN_TARGETS[1].context_options() == {"viewport": {"width": 1280, "height": 720}}


def test_mobile_context_options():
    options = EngineMatrix().select(["mobile-chrome"])[0].context_options()

    assert options["viewport"] == {"width": 393, "height": 727}
    assert options["is_mobile"] is True
    assert options["has_touch"] is True
    assert options["device_scale_factor"] == 2.75
    assert "Pixel 5" in options["user_agent"]


def test_target_from_dict():
    data = BUILTIN_TARGETS[4].to_dict()

    assert EngineTarget.from_dict(data) == BUILTIN_TARGETS[4]
