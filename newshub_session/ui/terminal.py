"""News Hub terminal client - login, signup and logout from the console"""

import sys
from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from ..app import SessionApp
from ..auth.context import session_scope, use_session
from ..services.notifications import ConsoleNotifier
from ..utils.config import ConfigManager
from ..utils.exceptions import ConfigError

console = Console()


class SessionTerminal:
    """Interactive menu over the session manager in scope"""

    def __init__(self):
        self.running = True

    def show_identity(self):
        session = use_session()
        user = session.current_user()

        table = Table(box=box.ROUNDED, show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        if user is None:
            table.add_row("Status", "[yellow]Not signed in[/yellow]")
        else:
            role = "[bold magenta]admin[/bold magenta]" if session.is_admin() else user.role
            table.add_row("Status", "[green]Signed in[/green]")
            table.add_row("Name", user.name)
            table.add_row("Email", user.email)
            table.add_row("Role", role)
            table.add_row("Token", "stored" if session.token() else "none")
        console.print(Panel(table, title="News Hub Session", border_style="blue"))

    def show_menu(self):
        session = use_session()
        if session.current_user() is None:
            menu_text = "[1] Login\n[2] Sign up\n[Q] Quit"
            choices = ["1", "2", "q", "Q"]
        else:
            menu_text = "[3] Logout\n[Q] Quit"
            choices = ["3", "q", "Q"]
        console.print(Panel(menu_text, title="Menu", border_style="cyan"))

        choice = Prompt.ask("Select option", choices=choices)
        if choice == "1":
            self.login_menu()
        elif choice == "2":
            self.signup_menu()
        elif choice == "3":
            session.logout()
        elif choice.lower() == "q":
            console.print("[yellow]Goodbye![/yellow]")
            self.running = False

    def login_menu(self):
        email = Prompt.ask("Email").strip()
        password = Prompt.ask("Password", password=True)
        with console.status("[bold blue]Signing in...[/bold blue]"):
            use_session().login(email, password)

    def signup_menu(self):
        name = Prompt.ask("Name").strip()
        email = Prompt.ask("Email").strip()
        password = Prompt.ask("Password", password=True)
        role = Prompt.ask("Role", choices=["user", "admin"], default="user")
        with console.status("[bold blue]Creating account...[/bold blue]"):
            use_session().signup(name, email, password, role)

    def run(self):
        while self.running:
            self.show_identity()
            self.show_menu()


def main(settings_path: Optional[str] = None) -> int:
    """Entry point for the newshub-session console script"""
    try:
        settings = ConfigManager(settings_path).load_settings()
    except ConfigError as e:
        console.print(f"[bold red]✗ Configuration error: {e}[/bold red]")
        return 1

    app = SessionApp(settings, notifier=ConsoleNotifier(console))
    try:
        with app as session, session_scope(session):
            SessionTerminal().run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Goodbye![/yellow]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
