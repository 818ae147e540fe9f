"""Sign-in view shown before a session exists or after it expires."""

from __future__ import annotations

import solara

from internship_portal.state import PortalController


@solara.component
def View(controller: PortalController) -> None:
    token, set_token = solara.use_state("", key="login-token")
    role, set_role = solara.use_state(controller.state.value.session.role, key="login-role")
    session = controller.state.value.session

    def handle_submit() -> None:
        if token.strip():
            controller.login(token.strip(), role=role)
            set_token("")

    with solara.Column(style={"maxWidth": "420px", "margin": "4rem auto", "gap": "1rem"}):
        solara.Text("Sign in", classes=["ip-title"])
        if session.expired:
            solara.Warning("Your session expired. Please log in again.", dense=True)
        solara.InputText("Access token", value=token, on_value=set_token, password=True)
        solara.Select("Role", value=role, values=["supervisor", "student"], on_value=set_role)
        solara.Button("Continue", color="primary", disabled=not token.strip(), on_click=handle_submit)
