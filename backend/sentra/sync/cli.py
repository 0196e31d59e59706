# Overview: `sentra-sync` command line: sign in, print a snapshot of the store, or keep it polling.

# Commands Legend:
# - sentra-sync login --email admin@sentra.com      (prompts for the password)
# - sentra-sync whoami
# - sentra-sync logout
# - sentra-sync snapshot                            load every collection and print counts/totals
# - sentra-sync poll --interval 5                   refresh live data until Ctrl+C
# Backend selection comes from SENTRA_BACKEND / SENTRA_API_URL (see SyncSettings.from_env).

import logging
import time

import click

from .adapters import Adapters
from .poller import POLL_INTERVAL_SECONDS, Poller
from .settings import SyncSettings
from .store import COLLECTIONS, AppStore
from .session import Session
from .transport import ApiError, build_transport


def _context():
    settings = SyncSettings.from_env()
    adapters = Adapters.over(build_transport(settings))
    store = AppStore(adapters)
    session = Session(adapters.auth, store, settings.session_file)
    return store, session


@click.group()
@click.option('--verbose', is_flag=True, help='Debug logging')
def main(verbose):
    """Sentra sync client."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command('login')
@click.option('--email', required=True)
@click.password_option(confirmation_prompt=False)
def login(email, password):
    _, session = _context()
    try:
        user = session.login(email, password)
    except ApiError as err:
        raise click.ClickException(err.message)
    click.echo(f"PASS Signed in as {user.name} ({user.role})")


@main.command('whoami')
def whoami():
    _, session = _context()
    info = session.info()
    if info is None:
        raise click.ClickException("Not signed in (or session expired)")
    hours = info["time_left_ms"] / 3_600_000
    click.echo(f"{info['user']['name']} <{info['user']['email']}> - session valid for {hours:.1f}h")


@main.command('logout')
def logout():
    _, session = _context()
    session.sign_out()
    click.echo("Signed out")


@main.command('snapshot')
@click.option('--client-id', type=int, default=None, help='Also load this client\'s links')
def snapshot(client_id):
    store, session = _context()
    session.restore()
    store.select_client(client_id)
    store.fetch_all()

    for name in COLLECTIONS:
        click.echo(f"{name:18} {len(store[name])}")
    click.echo(f"{'total sales':18} {store.total_sales():.2f}")
    click.echo(f"{'total collection':18} {store.total_collection():.2f}")
    click.echo(f"{'total balance':18} {store.total_balance():.2f}")
    click.echo(f"{'unread messages':18} {store.unread_messages_count()}")


@main.command('poll')
@click.option('--interval', type=float, default=POLL_INTERVAL_SECONDS, show_default=True)
def poll(interval):
    store, session = _context()
    if session.restore() is None:
        raise click.ClickException("Not signed in (or session expired)")

    poller = Poller(store, interval=interval)
    poller.start()
    try:
        while True:
            time.sleep(interval)
            click.echo(f"chats={len(store['chats'])} unread={store.unread_messages_count()} "
                       f"clients={len(store['clients'])} balance={store.total_balance():.2f}")
    except KeyboardInterrupt:
        pass
    finally:
        poller.stop()


if __name__ == '__main__':
    main()
