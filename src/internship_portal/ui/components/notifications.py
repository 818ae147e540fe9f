"""Toast stack rendered in the top right corner."""

from __future__ import annotations

import solara

from internship_portal.services.notifications import Notifier, Toast

_ALERTS = {
    "success": solara.Success,
    "error": solara.Error,
    "warning": solara.Warning,
    "info": solara.Info,
}


@solara.component
def ToastItem(toast: Toast, on_dismiss) -> None:
    alert = _ALERTS.get(toast.kind, solara.Info)
    with solara.Row(style={"alignItems": "center", "gap": "0.25rem"}):
        alert(toast.message, dense=True, style={"flex": "1 1 auto", "margin": "0"})
        solara.Button(icon_name="mdi-close", icon=True, small=True, on_click=lambda: on_dismiss(toast.id))


@solara.component
def ToastStack(notifier: Notifier) -> None:
    toasts = notifier.toasts.value
    if not toasts:
        return
    with solara.Column(classes=["ip-toasts"]):
        for toast in toasts:
            ToastItem(toast, notifier.dismiss).key(f"toast-{toast.id}")
