from __future__ import annotations


BUTTON_VARIANTS: dict[str, str] = {
    "primary": "color=primary text-color=white unelevated no-caps",
    "success": "color=positive text-color=white unelevated no-caps",
    "warning": "color=warning text-color=black unelevated no-caps",
    "danger": "color=negative text-color=white unelevated no-caps",
    "neutral": "outline color=grey-8 no-caps",
}


def button_props(variant: str = "primary") -> str:
    return BUTTON_VARIANTS.get(variant, BUTTON_VARIANTS["primary"])


def button_classes(full: bool = False) -> str:
    base = "h-[40px] px-4 rounded-lg font-semibold"
    return f"{base} w-full" if full else base


def panel_classes(padded: bool = True) -> str:
    base = "w-full rounded-xl border border-gray-200 bg-white shadow-sm"
    return f"{base} p-4" if padded else base


def section_title_classes() -> str:
    return "text-base font-semibold text-gray-800"


def muted_text_classes() -> str:
    return "text-sm text-gray-500"


STATUS_BADGE_COLORS: dict[str, str] = {
    "approved": "positive",
    "pending": "warning",
    "rejected": "negative",
    "paid": "primary",
}


def status_color(status: object) -> str:
    return STATUS_BADGE_COLORS.get(str(status or "").strip().lower(), "grey-7")
