"""Create a Spotify playlist from a JSON file of share links and search queries.

Usage:
    python main.py playlist.json
    python main.py playlist.json --config config.json --no-browser

The playlist file looks like:
    {"playlistName": "Road trip", "tracks": ["https://open.spotify.com/track/...", "artist - song"]}
"""

import dataclasses
import functools
import sys

import click

from config import CONFIG_PATH, load_config
from playlists import import_playlist, load_playlist_spec
from spotify_api.auth import spotify_app_setup_instructions
from spotify_api.authorizer import Authorizer
from spotify_api.callback_server import wait_for_authorization_code
from spotify_api.errors import ConfigError, SpotifyPlaylistError
from spotify_api.token_manager import TokenManager
from utils.logger import log_error, log_info, setup_logging


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("playlist_file", type=click.Path(dir_okay=False))
@click.option(
    "--config",
    "config_path",
    default=CONFIG_PATH,
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Path to config.json with clientId, clientSecret and redirectUri.",
)
@click.option("--token-file", type=click.Path(dir_okay=False), default=None, help="Override where tokens are cached.")
@click.option("--no-browser", is_flag=True, help="Print the authorization URL instead of opening a browser.")
@click.option("--reauth", is_flag=True, help="Discard cached tokens and authorize again.")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output.")
def cli(playlist_file, config_path, token_file, no_browser, reauth, verbose):
    """Build a private Spotify playlist from PLAYLIST_FILE."""
    setup_logging(verbose)

    try:
        config = load_config(config_path)
        if token_file:
            config = dataclasses.replace(config, token_path=token_file)

        spec = load_playlist_spec(playlist_file)

        token_manager = TokenManager(cache_path=config.token_path)
        if reauth and token_manager.clear():
            log_info("Discarded cached Spotify tokens.")

        authorizer = Authorizer(
            config,
            token_manager=token_manager,
            code_provider=functools.partial(wait_for_authorization_code, launch_browser=not no_browser),
        )
        result = import_playlist(config, spec, authorizer=authorizer, show_progress=sys.stderr.isatty())
    except ConfigError as e:
        log_error(str(e))
        log_info(spotify_app_setup_instructions())
        sys.exit(1)
    except (SpotifyPlaylistError, OSError) as e:
        log_error(f"Error: {e}")
        sys.exit(1)

    log_info(f"https://open.spotify.com/playlist/{result.playlist_id}")


if __name__ == "__main__":
    cli()
