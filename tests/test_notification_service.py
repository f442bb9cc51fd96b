import xml.etree.ElementTree as ET
from unittest import mock

import notification_service
from notification_service import NotificationThrottle, build_toast_xml, send_achievement


def test_build_toast_xml_with_icon():
    toast = ET.fromstring(build_toast_xml("First Blood", "Win a fight.", icon='C:/cache/one.jpg'))

    binding = toast.find('visual/binding')
    assert binding.get('template') == 'ToastGeneric'
    assert [t.text for t in binding.findall('text')] == ["First Blood", "Win a fight."]
    image = binding.find('image')
    assert image.get('src') == 'C:/cache/one.jpg'
    assert image.get('placement') == 'appLogoOverride'
    assert toast.find('audio').get('src') == notification_service.DEFAULT_AUDIO


def test_build_toast_xml_without_icon_escapes_text():
    xml = build_toast_xml("Tom & Jerry", "<b>")
    toast = ET.fromstring(xml)
    texts = toast.findall('visual/binding/text')
    assert texts[0].text == "Tom & Jerry"
    assert texts[1].text == "<b>"
    assert len(texts) == 2
    assert toast.find('visual/binding/image') is None


def test_throttle_blocks_repeats():
    throttle = NotificationThrottle(interval_seconds=60)
    assert throttle.can_send('A')
    assert not throttle.can_send('A')
    assert throttle.can_send('B')


def test_send_achievement_logs_off_windows(monkeypatch):
    monkeypatch.setattr(notification_service.sys, 'platform', 'linux')
    with mock.patch.object(notification_service.subprocess, 'run') as run:
        assert send_achievement("Title", "Message") is False
    run.assert_not_called()


def test_send_achievement_runs_powershell_on_windows(monkeypatch):
    monkeypatch.setattr(notification_service.sys, 'platform', 'win32')
    with mock.patch.object(notification_service.subprocess, 'run') as run:
        assert send_achievement("It's done", "Message", icon='icon.jpg') is True

    command = run.call_args[0][0]
    assert command[0] == 'powershell'
    assert "It''s done" in command[-1]
    assert notification_service.APP_ID in command[-1]


def test_send_achievement_swallows_powershell_failure(monkeypatch):
    monkeypatch.setattr(notification_service.sys, 'platform', 'win32')
    with mock.patch.object(notification_service.subprocess, 'run', side_effect=OSError("no powershell")):
        assert send_achievement("Title", "Message") is False


def test_send_achievement_respects_throttle(monkeypatch):
    monkeypatch.setattr(notification_service.sys, 'platform', 'linux')
    throttle = NotificationThrottle(interval_seconds=60)
    throttle.can_send("Title")
    assert send_achievement("Title", "Message", throttle_instance=throttle) is False
