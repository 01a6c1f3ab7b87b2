"""Streamlit chat page for the relay.

Run with (after ``pip install -e .`` so the ``frontend`` package resolves):
    streamlit run frontend/streamlit_app.py

Env vars:
    CHAT_BACKEND_URL (default http://localhost:3000)
"""
import streamlit as st

from frontend.chat_controller import ChatApi, ChatController

CATEGORIES = ["general", "greeting", "support", "technical", "other"]

st.set_page_config(page_title="AI Chatbot", page_icon="🤖")
st.title("AI Chatbot")

# One controller per browser session; Streamlit reruns this script on every event
if "controller" not in st.session_state:
    st.session_state.controller = ChatController(ChatApi())
controller: ChatController = st.session_state.controller


def _queue_prompt() -> None:
    # Runs before the rerun, so the page below is drawn with input disabled
    st.session_state.pending_prompt = st.session_state.chat_prompt


pending = st.session_state.pop("pending_prompt", None)
busy = pending is not None or not controller.input_enabled

transcript = st.empty()


def _draw(ctrl: ChatController) -> None:
    # Message text is escaped by the controller before it reaches markup
    transcript.markdown(ctrl.render_html(), unsafe_allow_html=True)


controller.on_change = _draw
_draw(controller)

if controller.notice:
    st.warning(controller.notice)

st.chat_input(
    "Sending..." if busy else "Type your message...",
    key="chat_prompt",
    on_submit=_queue_prompt,
    disabled=busy,
)

with st.sidebar:
    st.caption(f"Session: {controller.session_id}")

    confirm = st.checkbox("Yes, clear the chat history")
    if st.button("Clear chat", disabled=busy):
        if controller.clear_chat(confirm):
            st.rerun()
        elif not confirm:
            st.info("Tick the confirmation box to clear the chat.")

    with st.form("training_form", clear_on_submit=True):
        st.subheader("Train the bot")
        training_input = st.text_area("When the user says")
        training_output = st.text_area("The bot should answer")
        category = st.selectbox("Category", CATEGORIES)
        if st.form_submit_button("Add training example"):
            st.info(controller.submit_training(training_input, training_output, category))

if pending is not None:
    controller.submit(pending)
    # Redraw with the input enabled again
    st.rerun()
