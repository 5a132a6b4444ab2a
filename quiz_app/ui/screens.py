# ui/screens.py
import html

import streamlit as st

from quiz_app.config import TICK_INTERVAL_SEC
from quiz_app.core.controller import QuizController
from quiz_app.core.scoring import format_time
from quiz_app.core.quiz_flow import Screen
from quiz_app.ui.views import LoginView, ModuleListView, QuizView, ResultsView, escape_markdown

BADGE_COLORS = {
    "success": "#198754",
    "warning": "#ffc107",
    "primary": "#0d6efd",
}

OPTION_PREFIX = {
    "correct": "✅ ",
    "incorrect": "❌ ",
    "neutral": "",
}


def _badge(text: str, tier: str) -> str:
    color = BADGE_COLORS.get(tier, BADGE_COLORS["primary"])
    return (
        f"<span style='background:{color};color:white;border-radius:1rem;"
        f"padding:0.1rem 0.6rem;font-size:0.85rem;'>{text}</span>"
    )


def _confirm_box(controller: QuizController, message: str):
    st.warning(message)
    c1, c2 = st.columns(2)
    if c1.button("Confirmar", key="confirm_yes", use_container_width=True):
        controller.confirm()
        st.rerun()
    if c2.button("Cancelar", key="confirm_no", use_container_width=True):
        controller.cancel()
        st.rerun()


# ---------------------------
# LOGIN
# ---------------------------
def render_login(view: LoginView, controller: QuizController):
    st.markdown(
        f"<h1 style='text-align: center; color: #4F8BF9;'>{html.escape(view.title)}</h1>",
        unsafe_allow_html=True
    )
    st.divider()

    with st.form("login-form"):
        username = st.text_input("Seu nome:", value=view.username)
        submitted = st.form_submit_button("Entrar", use_container_width=True)

    if submitted:
        if not username.strip():
            st.warning("Digite seu nome para continuar.")
            return
        controller.login(username)
        st.rerun()


# ---------------------------
# MODULE SELECTION
# ---------------------------
def render_module_selection(view: ModuleListView, controller: QuizController):
    top, logout = st.columns([4, 1])
    top.markdown(f"### 👤 {escape_markdown(view.username)}")
    if logout.button("Sair", key="logout-btn"):
        controller.request_logout()
        st.rerun()

    if view.confirm_logout:
        _confirm_box(controller, "Tem certeza que deseja sair? Seu progresso está salvo.")

    st.markdown(f"**Progresso geral:** {_badge(f'{view.overall}%', view.overall_tier)}", unsafe_allow_html=True)
    st.progress(view.overall / 100)

    st.markdown("### 📚 Módulos")
    for item in view.modules:
        c1, c2 = st.columns([4, 1])
        if c1.button(escape_markdown(item.name), key=f"module_{item.module_id}", use_container_width=True):
            controller.select_module(item.module_id)
            st.rerun()
        c2.markdown(_badge(f"{item.progress}%", item.tier), unsafe_allow_html=True)

    if view.table is not None and not view.table.empty:
        with st.expander("📈 Detalhes do progresso"):
            st.dataframe(view.table, hide_index=True, use_container_width=True)


# ---------------------------
# QUIZ
# ---------------------------
def render_quiz(view: QuizView, controller: QuizController):
    head, quit_col = st.columns([4, 1])
    head.markdown(f"## {escape_markdown(view.title)}")
    if quit_col.button("Sair do quiz", key="quit-quiz-btn"):
        controller.request_abandon()
        st.rerun()

    if view.confirm_abandon:
        _confirm_box(controller, "Tem certeza que deseja sair do quiz? Seu progresso será salvo.")

    c1, c2, c3 = st.columns(3)
    c1.markdown(f"**{view.number_label}**")
    c2.markdown(f"`{view.type_label}`")
    with c3:
        render_clock(controller)

    st.progress(min(view.progress, 100) / 100)

    st.markdown(f"#### {escape_markdown(view.question)}")

    for option in view.options:
        label = f"{OPTION_PREFIX.get(option.status, '')}{escape_markdown(option.text)}"
        if st.button(label, key=f"option_{option.index}", disabled=option.disabled,
                     use_container_width=True):
            controller.answer(option.index)
            st.rerun()

    if view.explanation is not None:
        st.info(escape_markdown(view.explanation))
        if st.button("➡️ Próxima questão", key="next-question-btn", disabled=view.confirm_abandon,
                     use_container_width=True):
            controller.next_question()
            st.rerun()

    s1, s2 = st.columns(2)
    s1.success(f"Corretas: {view.correct}")
    s2.error(f"Incorretas: {view.incorrect}")


@st.fragment(run_every=TICK_INTERVAL_SEC)
def render_clock(controller: QuizController):
    """Drives the scheduled tasks once a second and shows the elapsed time."""
    before = controller.state.screen
    controller.run_pending()
    if controller.state.screen != before:
        st.rerun()
    session = controller.state.session
    if controller.state.screen == Screen.IN_QUIZ and session is not None:
        st.markdown(f"⏱️ {format_time(session.elapsed_seconds)}")


# ---------------------------
# RESULTS
# ---------------------------
def render_results(view: ResultsView, controller: QuizController):
    st.markdown(f"## Resultado · {escape_markdown(view.title)}")

    st.markdown(
        f"""
        <div style="width:140px;height:140px;border-radius:50%;border:8px solid {view.color};
                    display:flex;align-items:center;justify-content:center;margin:1rem auto;">
          <span style="font-size:2rem;font-weight:bold;">{view.score}%</span>
        </div>
        """,
        unsafe_allow_html=True
    )

    c1, c2, c3 = st.columns(3)
    c1.metric("Corretas", view.correct)
    c2.metric("Incorretas", view.incorrect)
    c3.metric("Tempo", view.time)

    st.info(view.analysis)

    b1, b2 = st.columns(2)
    if b1.button("🔄 Refazer módulo", key="retry-module-btn", use_container_width=True):
        controller.retry()
        st.rerun()
    if b2.button("⬅️ Voltar aos módulos", key="return-to-modules-btn", use_container_width=True):
        controller.return_to_modules()
        st.rerun()


RENDERERS = {
    LoginView: render_login,
    ModuleListView: render_module_selection,
    QuizView: render_quiz,
    ResultsView: render_results,
}


def render(view, controller: QuizController):
    RENDERERS[type(view)](view, controller)
