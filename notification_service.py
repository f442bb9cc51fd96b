# notification_service.py
import subprocess
import sys
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta
# 依存関係: logging_utilsからロガーを取得
from logging_utils import get_logger

_notify_logger = get_logger('notification')

APP_ID = 'Microsoft.XboxGamingOverlay_8wekyb3d8bbwe!App'
DEFAULT_AUDIO = 'ms-winsoundevent:Notification.Default'
ACHIEVEMENT_AUDIO = 'ms-winsoundevent:Notification.AchievementThing'
TOAST_TEMPLATE = 'ToastGeneric'

_POWERSHELL_SCRIPT = (
    "[Windows.UI.Notifications.ToastNotificationManager, Windows.UI.Notifications, ContentType = WindowsRuntime] | Out-Null;"
    "[Windows.Data.Xml.Dom.XmlDocument, Windows.Data.Xml.Dom.XmlDocument, ContentType = WindowsRuntime] | Out-Null;"
    "$xml = New-Object Windows.Data.Xml.Dom.XmlDocument;"
    "$xml.LoadXml('{xml}');"
    "$toast = New-Object Windows.UI.Notifications.ToastNotification($xml);"
    "[Windows.UI.Notifications.ToastNotificationManager]::CreateToastNotifier('{app_id}').Show($toast)"
)


class NotificationThrottle:
    """Limits the frequency of notifications."""
    def __init__(self, interval_seconds=10):
        self.interval = timedelta(seconds=interval_seconds)
        self.last_sent = {}

    def can_send(self, subject):
        """Checks if a notification with this subject can be sent now."""
        now = datetime.now()
        if subject not in self.last_sent or (now - self.last_sent[subject]) > self.interval:
            self.last_sent[subject] = now
            return True
        return False


def build_toast_xml(title, message, icon='', audio=DEFAULT_AUDIO):
    """Builds the XML document of a Windows toast notification."""
    toast = ET.Element('toast')
    visual = ET.SubElement(toast, 'visual')
    binding = ET.SubElement(visual, 'binding', template=TOAST_TEMPLATE)

    ET.SubElement(binding, 'text').text = title
    ET.SubElement(binding, 'text').text = message
    if icon and str(icon).strip():
        ET.SubElement(binding, 'image', src=str(icon), placement='appLogoOverride')

    ET.SubElement(toast, 'audio', src=audio)
    return ET.tostring(toast, encoding='unicode')


def _show_toast(xml_content, app_id=APP_ID):
    if not xml_content.strip():
        raise ValueError("xml_content cannot be empty")
    if not app_id.strip():
        raise ValueError("app_id cannot be empty")

    # PowerShell の単一引用符文字列内では ' を '' にエスケープする
    script = _POWERSHELL_SCRIPT.format(
        xml=xml_content.replace("'", "''"),
        app_id=app_id.replace("'", "''"),
    )
    subprocess.run(
        ['powershell', '-NoProfile', '-WindowStyle', 'Hidden', '-Command', script],
        check=True,
        capture_output=True,
        timeout=30,
    )


def send_achievement(title, message, icon='', throttle_instance=None):
    """
    Shows an achievement toast. Returns True when a notification was shown.
    Errors are logged and never raised to the caller.
    """
    if throttle_instance and not throttle_instance.can_send(title):
        _notify_logger.warning(f"Notification '{title}' throttled.")
        return False

    _notify_logger.info(f"Sending achievement notification: {title}")

    if sys.platform != 'win32':
        # トースト通知は Windows のみ対応
        _notify_logger.info(f"Achievement unlocked: {title} - {message}")
        return False

    try:
        xml_content = build_toast_xml(title, message, icon=icon, audio=ACHIEVEMENT_AUDIO)
        _show_toast(xml_content)
        return True
    except (OSError, ValueError, subprocess.SubprocessError) as e:
        _notify_logger.error(f"Failed to show toast notification '{title}': {e}")
        return False
