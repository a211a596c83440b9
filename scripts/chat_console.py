"""Interactive terminal chat client.

Usage:
    python -m scripts.chat_console --backend http://localhost:3001
    python -m scripts.chat_console --guest --direct

Press Ctrl-C while a reply is being written to stop it.
"""

import argparse
import asyncio
import signal
from pathlib import Path

from chatbot.client.backend_client import BackendClient
from chatbot.client.chat_controller import ChatController, ChatState
from chatbot.client.completion_client import CompletionClient
from chatbot.client.conversation_repository import ConversationRepository
from chatbot.client.export import encode_share_link, to_markdown, to_text
from chatbot.client.search import SearchOverlay
from chatbot.client.session_store import SessionStore
from chatbot.client.streaming import StreamingSimulator
from chatbot.core.config import settings
from chatbot.core.exceptions import AppException
from chatbot.dependencies import get_completion_service

HELP = """Commands:
  /new                  start a new chat
  /chats                list your chats
  /open <n>             open chat number n from /chats
  /rename <title>       rename the current chat
  /delete               delete the current chat
  /search <query>       highlight messages containing query
  /export <txt|md> <path>
  /share                print a share link for this chat
  /login | /register | /guest | /logout
  /quit"""


class Console:
    def __init__(
        self,
        backend: BackendClient,
        session: SessionStore,
        conversations: ConversationRepository,
        controller: ChatController,
    ) -> None:
        self.backend = backend
        self.session = session
        self.conversations = conversations
        self.controller = controller
        self.search = SearchOverlay(conversations.transcript_changed)
        self._printed = 0
        controller.progress.subscribe(self._on_progress)
        controller.state_changed.subscribe(self._on_state)

    # --- Rendering ---

    def _on_progress(self, prefix: str) -> None:
        print(prefix[self._printed :], end="", flush=True)
        self._printed = len(prefix)

    def _on_state(self, state: ChatState) -> None:
        if state == ChatState.EMITTING:
            self._printed = 0
            print("assistant> ", end="", flush=True)
        elif state == ChatState.CANCELLED and self._printed:
            print(" [stopped]")
        elif state == ChatState.SETTLED:
            print()
        elif state == ChatState.ERRORED:
            print(f"assistant> {self.conversations.messages[-1].content}")

    def _print_transcript(self) -> None:
        for i, message in enumerate(self.conversations.messages):
            mark = "*" if i in self.search.matches else " "
            print(f"{mark}[{message.timestamp}] {message.role}> {message.content}")

    @staticmethod
    async def _ask(prompt: str) -> str:
        return await asyncio.to_thread(input, prompt)

    # --- Account ---

    async def _sign_in(self, email: str, password: str) -> None:
        user = await self.backend.login(email, password)
        self.session.sign_in(user)
        self.conversations.reset()
        print(f"Signed in as {user.username}")
        await self._list_chats()

    async def login(self) -> None:
        email = await self._ask("email: ")
        password = await self._ask("password: ")
        await self._sign_in(email, password)

    async def register(self) -> None:
        username = await self._ask("username: ")
        email = await self._ask("email: ")
        password = await self._ask("password: ")
        await self.backend.register(username, email, password)
        await self._sign_in(email, password)

    async def logout(self) -> None:
        if self.session.user is not None:
            await self.backend.logout()
        self.session.clear()
        self.conversations.reset()
        print("Signed out")

    # --- Chats ---

    async def _list_chats(self) -> None:
        user = self.session.user
        chats = await self.conversations.list_chats(user.user_id if user else None)
        if not chats:
            print("No chats yet")
        for n, chat in enumerate(chats, start=1):
            active = ">" if chat.id == self.conversations.active_chat_id else " "
            print(f"{active}{n:3d}. {chat.title}")

    async def _open(self, arg: str) -> None:
        user = self.session.user
        if user is None or not arg.isdigit():
            print("Usage: /open <n> (signed in only)")
            return
        index = int(arg) - 1
        if not 0 <= index < len(self.conversations.chats):
            print("No such chat")
            return
        await self.conversations.open_chat(user.user_id, self.conversations.chats[index].id)
        self._print_transcript()

    def _current_title(self) -> str:
        for chat in self.conversations.chats:
            if chat.id == self.conversations.active_chat_id:
                return chat.title
        return "Chat"

    # --- Main loop ---

    async def reply(self, text: str) -> None:
        loop = asyncio.get_running_loop()
        loop.add_signal_handler(signal.SIGINT, self.controller.stop)
        try:
            await self.controller.send(text)
        finally:
            loop.remove_signal_handler(signal.SIGINT)

    async def handle(self, line: str) -> bool:
        command, _, arg = line.partition(" ")
        arg = arg.strip()
        match command:
            case "/quit":
                return False
            case "/help":
                print(HELP)
            case "/new":
                self.conversations.start_new_chat()
                print("Started a new chat")
            case "/chats":
                await self._list_chats()
            case "/open":
                await self._open(arg)
            case "/rename":
                if self.conversations.active_chat_id:
                    await self.conversations.rename_chat(
                        self.conversations.active_chat_id, arg
                    )
            case "/delete":
                if self.conversations.active_chat_id:
                    await self.conversations.delete_chat(self.conversations.active_chat_id)
                    print("Chat deleted")
            case "/search":
                matches = self.search.set_query(arg)
                print(f"{len(matches)} match(es)")
                self._print_transcript()
            case "/export":
                fmt, _, path = arg.partition(" ")
                messages = self.conversations.messages
                data = to_markdown(messages, self._current_title()) if fmt == "md" else to_text(messages)
                Path(path.strip() or f"chat.{fmt or 'txt'}").write_bytes(data)
                print("Exported")
            case "/share":
                print(
                    encode_share_link(
                        settings.client.share_base_url,
                        self.conversations.messages,
                        self._current_title(),
                    )
                )
            case "/login":
                await self.login()
            case "/register":
                await self.register()
            case "/guest":
                self.session.enter_guest_mode()
                self.conversations.reset()
                print("Guest mode: messages are not saved")
            case "/logout":
                await self.logout()
            case _ if line.startswith("/"):
                print(HELP)
            case _:
                await self.reply(line)
        return True

    async def run(self, guest: bool = False) -> None:
        self.session.load()
        if guest:
            self.session.enter_guest_mode()
        state = self.session.state
        if state.user is not None:
            self.backend.set_access_token(state.user.access_token)
            print(f"Welcome back, {state.user.username}")
            await self._list_chats()
            if state.current_chat_id:
                await self.conversations.open_chat(state.user.user_id, state.current_chat_id)
                self._print_transcript()
        elif not state.guest_mode:
            print("Not signed in: /login, /register or /guest")
        print("Type /help for commands")

        while True:
            try:
                line = (await self._ask("you> ")).strip()
            except EOFError:
                break
            if not line:
                continue
            try:
                if not await self.handle(line):
                    break
            except AppException as exc:
                print(f"Error: {exc.message}")
        self.search.close()


async def run_console(backend_url: str, state_path: Path, direct: bool, guest: bool) -> None:
    backend = BackendClient(backend_url)
    session = SessionStore(state_path)
    conversations = ConversationRepository(backend, session)
    completer = get_completion_service().complete if direct else backend.complete
    controller = ChatController(
        conversations,
        CompletionClient(completer),
        session,
        StreamingSimulator(settings.client.emission_delay),
    )
    console = Console(backend, session, conversations, controller)
    try:
        await console.run(guest)
    finally:
        await backend.aclose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Chat in the terminal")
    parser.add_argument("--backend", default=settings.client.backend_url, help="Backend base URL")
    parser.add_argument("--state", type=Path, default=settings.client.state_path, help="Session file")
    parser.add_argument("--direct", action="store_true", help="Call the LLM provider directly")
    parser.add_argument("--guest", action="store_true", help="Start in guest mode")
    args = parser.parse_args()

    asyncio.run(run_console(args.backend, args.state, args.direct, args.guest))


if __name__ == "__main__":
    main()
