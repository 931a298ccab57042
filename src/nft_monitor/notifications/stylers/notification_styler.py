# -*- coding: utf-8 -*-
"""Event-based notification styler with emoji separators (Telegram-style)."""

from __future__ import annotations

import html
from decimal import Decimal, InvalidOperation
from typing import Any, cast

from nft_monitor.notifications.types import NotificationMessage, NotificationStyler
from nft_monitor.utils.validation import mask_address


class EventNotificationStyler(NotificationStyler):
    """Render notifications by event_type with emojis, separators and formatted sections."""

    def render(self, message: NotificationMessage) -> str:
        """Dispatch to the appropriate renderer based on event_type."""
        if message.event_type == "supply_threshold_reached":
            return self._render_supply(message)
        if message.event_type == "holding_new_item":
            return self._render_holding(message)
        if message.event_type == "system_started":
            return self._render_system_started(message)
        if message.event_type == "system_stopped":
            return self._render_system_stopped(message)
        return self._render_generic(message)

    def _render_supply(self, message: NotificationMessage) -> str:
        payload: dict[str, Any] = message.payload.copy() if message.payload else {}
        emoji, title = self._title(message.event_type)
        name = payload.get("target_name") or payload.get("locator") or "N/A"
        lines = [
            f"{emoji} <b>{title}</b>\n",
            self._section(
                "📦 Collection",
                [
                    ("🏷️ Name", self._escape(name)),
                    ("🔗 Contract / Slug", self._escape(payload.get("locator"))),
                    ("⛓️ Chain", payload.get("chain") or "N/A"),
                ],
            ),
            self._section(
                "📊 Supply",
                [
                    ("🔢 Count", self._format_int(payload.get("count"))),
                    ("🎯 Threshold", self._format_int(payload.get("threshold"))),
                    ("💰 Floor", self._format_price(payload.get("floor_price"))),
                ],
            ),
        ]
        url = payload.get("marketplace_url")
        if isinstance(url, str) and url:
            lines.append(self._section("🛒 Marketplace", [("", self._link(url, "View collection"))]))
        return "\n".join([line for line in lines if line]).strip()

    def _render_holding(self, message: NotificationMessage) -> str:
        payload: dict[str, Any] = message.payload.copy() if message.payload else {}
        emoji, title = self._title(message.event_type)
        wallet = payload.get("wallet")
        token_id = payload.get("token_id")
        lines = [
            f"{emoji} <b>{title}</b>\n",
            self._section(
                "👛 Wallet",
                [
                    ("🏷️ Label", self._escape(payload.get("target_name"))),
                    ("🔑 Address", mask_address(wallet) if isinstance(wallet, str) else "N/A"),
                    ("⛓️ Chain", payload.get("chain") or "N/A"),
                ],
            ),
            self._section(
                "🖼️ Item",
                [
                    ("📛 Name", self._escape(payload.get("item_name"))),
                    ("📜 Contract", payload.get("contract") or "N/A"),
                    ("🆔 Token ID", f"#{token_id}" if token_id is not None else "N/A"),
                ],
            ),
        ]
        return "\n".join([line for line in lines if line]).strip()

    def _render_system_started(self, message: NotificationMessage) -> str:
        """Render system started notification."""
        emoji, title = self._title(message.event_type)
        payload = message.payload or {}
        lines = [f"{emoji} <b>{title}</b>\n", self._section("🚀 Status", [("", message.message)])]
        counts = [
            ("📦 Supply watches", payload.get("supply_watch_count")),
            ("👛 Holding watches", payload.get("holding_watch_count")),
        ]
        lines.append(self._section("🎯 Targets", [(k, str(v)) for k, v in counts if v is not None]))
        raw_wallets = payload.get("wallets")
        if isinstance(raw_wallets, list) and raw_wallets:
            wallets = [mask_address(str(w)) for w in cast(list[Any], raw_wallets)]
            lines.append(self._section("👛 Wallets", [("", ", ".join(wallets))]))
        return "\n".join([line for line in lines if line]).strip()

    def _render_system_stopped(self, message: NotificationMessage) -> str:
        """Render system stopped notification."""
        emoji, title = self._title(message.event_type)
        lines = [f"{emoji} <b>{title}</b>\n", self._section("🛑 Status", [("", message.message)])]
        return "\n".join([line for line in lines if line]).strip()

    def _render_generic(self, message: NotificationMessage) -> str:
        """Render unknown event types using message and payload."""
        emoji, title = self._title(message.event_type)
        lines = [f"{emoji} <b>{title}</b>", self._escape(message.message)]
        if message.payload:
            for key in sorted(message.payload.keys()):
                value = message.payload.get(key)
                if value is not None:
                    lines.append(f"<b>{key}:</b> {self._escape(value)}")
        return "\n".join(lines).strip()

    @staticmethod
    def _title(event_type: str) -> tuple[str, str]:
        """Get the emoji and title for the given event type."""
        mapping = {
            "supply_threshold_reached": ("🚨", "Supply Threshold Reached"),
            "holding_new_item": ("🆕", "New NFT Received"),
            "system_started": ("▶️", "System Started"),
            "system_stopped": ("⏹️", "System Stopped"),
        }
        return mapping.get(event_type, ("ℹ️", event_type.replace("_", " ").title()))

    def _section(self, header: str, rows: list[tuple[str, Any]]) -> str:
        """Format a section with a header and rows."""
        lines: list[str] = []
        content_lines: list[str] = []
        for label, value in rows:
            if not value:
                continue
            if label:
                content_lines.append(f"{self._format_label(label)} {value}")
            else:
                content_lines.append(str(value))
        if not content_lines:
            return ""
        lines.append(f"{self._format_heading(header)}\n{'─'*12}")
        lines.extend(content_lines)
        return "\n".join(lines) + "\n"

    @staticmethod
    def _escape(value: Any) -> str:
        if value is None:
            return ""
        return html.escape(str(value), quote=False)

    @staticmethod
    def _link(url: str, text: str) -> str:
        return f'<a href="{html.escape(url, quote=True)}">{html.escape(text)}</a>'

    @staticmethod
    def _format_int(value: Any) -> str:
        if value is None:
            return "N/A"
        try:
            return f"{int(value):,}"
        except (TypeError, ValueError):
            return str(value)

    @staticmethod
    def _format_price(value: Any) -> str:
        """Floor price in native currency, up to 4 decimals; empty when unknown."""
        if value is None:
            return ""
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            return str(value)
        return f"{number:,.4f}".rstrip("0").rstrip(".")

    @staticmethod
    def _format_heading(text: str) -> str:
        """Format a section heading with bold text."""
        if not text:
            return ""
        emoji, _, remainder = text.partition(" ")
        if remainder:
            return f"{emoji} <b>{remainder}</b>"
        return f"<b>{text}</b>"

    @staticmethod
    def _format_label(label: str) -> str:
        """Format row labels with bold text."""
        if not label:
            return ""
        emoji, _, remainder = label.partition(" ")
        if remainder:
            return f"{emoji} <b>{remainder}:</b>"
        return f"<b>{label}:</b>"
