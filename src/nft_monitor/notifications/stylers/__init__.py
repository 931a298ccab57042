from nft_monitor.notifications.stylers.notification_styler import EventNotificationStyler

__all__ = ["EventNotificationStyler"]
