from nft_monitor.services.alerts.alert_notifier import (
    AlertSink,
    NotificationAlertSink,
    to_notification,
)

__all__ = ["AlertSink", "NotificationAlertSink", "to_notification"]
