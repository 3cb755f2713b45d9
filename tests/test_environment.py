from snippy_core.environment import BackendSet, EnvironmentDetector, SESSION_WAYLAND, SESSION_X11
from snippy_core.errors import NoMenuTool, NoSessionDetected, NoTypingTool


def fake_which(*available):
    def which(name):
        return f"/usr/bin/{name}" if name in available else None

    return which


def test_wayland_prefers_native_tools():
    detector = EnvironmentDetector(
        env={"WAYLAND_DISPLAY": "wayland-0", "DISPLAY": ":0"},
        which=fake_which("wtype", "ydotool", "wl-copy", "xclip", "rofi-wayland", "rofi", "fzf"),
    )
    backends = detector.detect("auto")
    assert backends == BackendSet(
        session=SESSION_WAYLAND, menu="rofi-wayland", typing="wtype", clipboard="wl-copy", paste="wtype"
    )


def test_wayland_fallbacks():
    detector = EnvironmentDetector(env={"WAYLAND_DISPLAY": "wayland-0"}, which=fake_which("ydotool", "xclip", "wofi"))
    backends = detector.detect("auto")
    assert backends.typing == "ydotool"
    assert backends.paste == "ydotool"
    assert backends.clipboard == "xclip"
    assert backends.menu == "wofi"


def test_wayland_clipboard_order_ends_with_pbcopy():
    detector = EnvironmentDetector(env={"WAYLAND_DISPLAY": "w"}, which=fake_which("wtype", "fzf", "pbcopy", "xsel"))
    assert detector.detect().clipboard == "xsel"
    detector = EnvironmentDetector(env={"WAYLAND_DISPLAY": "w"}, which=fake_which("wtype", "fzf", "pbcopy"))
    assert detector.detect().clipboard == "pbcopy"


def test_x11_session():
    detector = EnvironmentDetector(env={"DISPLAY": ":0"}, which=fake_which("xdotool", "xclip", "xsel", "wofi", "fzf"))
    backends = detector.detect("auto")
    assert backends.session == SESSION_X11
    assert backends.typing == "xdotool"
    assert backends.clipboard == "xsel"
    # wofi is only chosen automatically under a compositor
    assert backends.menu == "fzf"


def test_missing_clipboard_is_not_fatal():
    detector = EnvironmentDetector(env={"DISPLAY": ":0"}, which=fake_which("xdotool", "rofi"))
    backends = detector.detect()
    assert backends.clipboard is None
    assert backends.menu == "rofi"


def test_no_session_is_fatal_even_with_fzf():
    detector = EnvironmentDetector(env={}, which=fake_which("fzf", "xdotool"))
    try:
        detector.detect()
    except NoSessionDetected as exc:
        assert "No GUI session" in str(exc)
    else:
        raise AssertionError("expected NoSessionDetected")

    detector = EnvironmentDetector(env={}, which=fake_which())
    try:
        detector.detect()
    except NoSessionDetected as exc:
        assert "No Wayland or X11 display" in str(exc)
    else:
        raise AssertionError("expected NoSessionDetected")


def test_no_typing_tool():
    detector = EnvironmentDetector(env={"DISPLAY": ":0"}, which=fake_which("rofi", "xclip"))
    try:
        detector.detect()
    except NoTypingTool as exc:
        assert "xdotool" in str(exc)
    else:
        raise AssertionError("expected NoTypingTool")


def test_no_menu_tool():
    detector = EnvironmentDetector(env={"DISPLAY": ":0"}, which=fake_which("xdotool"))
    try:
        detector.detect()
    except NoMenuTool:
        pass
    else:
        raise AssertionError("expected NoMenuTool")


def test_forced_menu_must_exist():
    detector = EnvironmentDetector(env={"DISPLAY": ":0"}, which=fake_which("xdotool", "rofi", "wofi"))
    assert detector.detect("wofi").menu == "wofi"
    try:
        detector.detect("fzf")
    except NoMenuTool as exc:
        assert "Menu tool not found: fzf" in str(exc)
    else:
        raise AssertionError("expected NoMenuTool")
    try:
        detector.detect("dmenu")
    except NoMenuTool as exc:
        assert "Unknown menu tool" in str(exc)
    else:
        raise AssertionError("expected NoMenuTool")


def test_detect_never_executes_backends():
    calls = []

    def which(name):
        calls.append(name)
        return "/bin/" + name

    backends = EnvironmentDetector(env={"WAYLAND_DISPLAY": "w"}, which=which).detect()
    assert backends.menu == "rofi-wayland"
    assert all(isinstance(name, str) for name in calls)
