"""
WebSocket chat CLI for project chats.

Usage:
    synergy chat -p <project id>
    synergy history -p <project id>
"""

import asyncio
import json
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional, Union
from urllib.parse import urlencode

import click
import httpx
import websockets

from synergy_types.messages import ChatMessageGet
from synergy_types.websocket import WSAck, WSConnected, WSError, WSMessage, WSUserLeft, parse_server_event
from synergy_cli.auth import authenticate
from synergy_cli.config import CLIProfile


@dataclass(frozen=True)
class SendSucceeded:
    message_id: str
    ref: str


@dataclass(frozen=True)
class SendFailed:
    error: str
    ref: str


SendResult = Union[SendSucceeded, SendFailed]


def format_message(message: ChatMessageGet) -> str:
    return f"[{message.timestamp.strftime('%H:%M:%S')}] {message.username}: {message.content}"


async def fetch_history(profile: CLIProfile, project_id: str) -> List[ChatMessageGet]:
    """Load the persisted history of a project, oldest first."""
    async with httpx.AsyncClient() as client:
        response = await client.get(
            f"{profile.base_url}/api/messages/projects/{project_id}/messages",
            headers={"Authorization": f"Bearer {profile.token}"}
        )
    if response.status_code != 200:
        try:
            detail = response.json().get("message", response.text)
        except ValueError:
            detail = response.text
        raise click.ClickException(f"Could not load history: {detail}")
    return [ChatMessageGet.model_validate(item) for item in response.json()]


class ChatClient:
    """Interactive WebSocket chat client bound to one project."""

    def __init__(
        self,
        api_url: str,
        access_token: str,
        project_id: str,
        ack_timeout: float = 10.0,
        verbose: bool = False,
    ):
        self.api_url = api_url.rstrip('/')
        self.access_token = access_token
        self.project_id = project_id
        self.ack_timeout = ack_timeout
        self.verbose = verbose
        self.running = True
        self.ws = None
        self._pending: Dict[str, asyncio.Future] = {}

    @property
    def ws_url(self) -> str:
        url = self.api_url
        # WebSocket lives at the root, not under /api
        if url.endswith("/api"):
            url = url[:-4]
        url = url.replace("http://", "ws://").replace("https://", "wss://")
        return f"{url}/ws?{urlencode({'token': self.access_token, 'projectId': self.project_id})}"

    async def connect(self) -> bool:
        """Open the socket and wait for the admission result."""
        if self.verbose:
            click.echo(f"[debug] Connecting to: {self.ws_url.split('?')[0]}?projectId={self.project_id}")

        try:
            self.ws = await websockets.connect(self.ws_url)
            first = parse_server_event(json.loads(await self.ws.recv()))
        except (OSError, websockets.exceptions.WebSocketException, ValueError) as e:
            click.echo(f"[error] Connection failed: {e}")
            return False

        if isinstance(first, WSConnected):
            click.echo(f"[system] {first.message} as {first.username}")
            return True

        if isinstance(first, WSError):
            click.echo(f"[error] {first.code}: {first.message}")
        else:
            click.echo("[error] Unexpected first frame from server")
        await self.close()
        return False

    async def close(self):
        self.running = False
        if self.ws is not None:
            await self.ws.close()
            self.ws = None
        for future in self._pending.values():
            if not future.done():
                future.set_result(SendFailed(error="Connection closed", ref=""))
        self._pending.clear()

    async def send(self, content: str) -> SendResult:
        """Send one message and wait for its correlated acknowledgment."""
        ref = uuid.uuid4().hex[:12]
        future = asyncio.get_running_loop().create_future()
        self._pending[ref] = future

        try:
            await self.ws.send(json.dumps({"type": "message", "content": content, "ref": ref}))
            return await asyncio.wait_for(future, timeout=self.ack_timeout)
        except asyncio.TimeoutError:
            return SendFailed(error="No acknowledgment received", ref=ref)
        except websockets.exceptions.ConnectionClosed:
            return SendFailed(error="Connection closed", ref=ref)
        finally:
            self._pending.pop(ref, None)

    async def listen(self):
        """Listen for incoming WebSocket frames."""
        while self.running and self.ws:
            try:
                raw = await asyncio.wait_for(self.ws.recv(), timeout=1.0)
            except asyncio.TimeoutError:
                continue
            except websockets.exceptions.ConnectionClosed as e:
                if self.running:
                    click.echo(f"[system] Connection closed ({e.code})")
                self.running = False
                break

            try:
                data = json.loads(raw)
            except ValueError:
                click.echo(f"[error] Invalid frame: {raw!r}")
                continue
            self._handle_event(data)

    def _handle_event(self, data: dict):
        event = parse_server_event(data)

        if isinstance(event, WSMessage):
            click.echo(format_message(event))

        elif isinstance(event, WSAck):
            future = self._pending.get(event.ref)
            if future is not None and not future.done():
                if event.success:
                    future.set_result(SendSucceeded(message_id=event.message_id, ref=event.ref))
                else:
                    future.set_result(SendFailed(error=event.error or "Send failed", ref=event.ref))

        elif isinstance(event, WSUserLeft):
            click.echo(f"[left] {event.username} left the chat")

        elif isinstance(event, WSError):
            click.echo(f"[error] {event.code}: {event.message}")

        elif isinstance(event, WSConnected):
            click.echo(f"[system] {event.message}")

        else:
            click.echo(f"[{data.get('type', 'unknown')}] {json.dumps(data)}")

    async def input_loop(self):
        """Interactive input for sending messages."""
        loop = asyncio.get_event_loop()

        click.echo("")
        click.echo("─" * 50)
        click.echo(f"Chat ready. Project: {self.project_id}")
        click.echo("Type a message and press enter. /quit to leave.")
        click.echo("─" * 50)
        click.echo("")

        while self.running:
            try:
                line = await loop.run_in_executor(None, lambda: input("> "))
            except (EOFError, KeyboardInterrupt):
                self.running = False
                break

            line = line.strip()
            if not line:
                continue

            if line in ("/quit", "/q"):
                self.running = False
                break

            if not self.running:
                break

            result = await self.send(line)
            if isinstance(result, SendFailed):
                click.echo(f"[error] Not sent: {result.error}")

    async def run(self, listen_only: bool = False):
        if not await self.connect():
            return

        try:
            if listen_only:
                click.echo("[system] Listening... (Ctrl+C to exit)")
                await self.listen()
            else:
                await asyncio.gather(self.listen(), self.input_loop())
        finally:
            await self.close()
            click.echo("[system] Disconnected")


async def _run_chat(profile: CLIProfile, project_id: str, listen_only: bool, show_history: bool, verbose: bool):
    if show_history:
        for message in await fetch_history(profile, project_id):
            click.echo(format_message(message))

    client = ChatClient(profile.base_url, profile.token, project_id, verbose=verbose)
    await client.run(listen_only=listen_only)


@click.command()
@click.option("--project", "-p", "project_id", required=True, help="Project id")
@click.option("--listen-only", "-l", is_flag=True, help="Only print incoming messages")
@click.option("--no-history", is_flag=True, help="Do not print earlier messages on join")
@click.option("--verbose", "-v", is_flag=True, help="Print connection details")
@authenticate
def chat(project_id: str, listen_only: bool, no_history: bool, verbose: bool, profile: CLIProfile):
    """Join the real-time chat of a project."""
    try:
        asyncio.run(_run_chat(profile, project_id, listen_only, not no_history, verbose))
    except KeyboardInterrupt:
        click.echo("\n[system] Interrupted")


@click.command()
@click.option("--project", "-p", "project_id", required=True, help="Project id")
@authenticate
def history(project_id: str, profile: CLIProfile):
    """Print the message history of a project."""
    messages = asyncio.run(fetch_history(profile, project_id))
    if not messages:
        click.echo("No messages yet.")
        return
    for message in messages:
        click.echo(format_message(message))
