import json
import sys
import unittest
from pathlib import Path

import httpx

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from playlists.builder import MAX_TRACKS_PER_REQUEST, PLAYLIST_DESCRIPTION, PlaylistBuilder, chunked
from spotify_api.client import SpotifyClient
from spotify_api.errors import AddTracksError, PlaylistCreateError, ProfileError
from spotify_api.token_manager import TokenInfo


class FakeSpotifyClient:
    def __init__(self, *, fail_on_add_call=None, user_id="user1", playlist_id="pl1"):
        self.fail_on_add_call = fail_on_add_call
        self.user_id = user_id
        self.playlist_id = playlist_id
        self.add_calls = []
        self.created = []

    def me(self):
        return {"id": self.user_id} if self.user_id else {}

    def create_playlist(self, user_id, name, *, description="", public=False):
        self.created.append((user_id, name, description, public))
        return {"id": self.playlist_id}

    def add_items_to_playlist(self, playlist_id, uris):
        self.add_calls.append((playlist_id, list(uris)))
        if self.fail_on_add_call is not None and len(self.add_calls) == self.fail_on_add_call:
            raise AddTracksError("Spotify API add tracks failed (HTTP 502): bad gateway", status_code=502, body="bad gateway")
        return {"snapshot_id": f"snap{len(self.add_calls)}"}


def _http_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


TOKEN = TokenInfo(access_token="at", refresh_token="rt", expires_at=0)


class TestChunking(unittest.TestCase):
    def test_chunked_sizes(self):
        self.assertEqual([len(c) for c in chunked([str(i) for i in range(250)], 100)], [100, 100, 50])
        self.assertEqual(chunked([], 100), [])
        self.assertEqual(chunked(["a", "b"], 100), [["a", "b"]])

    def test_add_tracks_250_ids_issues_three_ordered_requests(self):
        ids = [f"id{i}" for i in range(250)]
        client = FakeSpotifyClient()

        added = PlaylistBuilder(client).add_tracks("pl1", ids)

        self.assertEqual(added, 250)
        self.assertEqual([len(uris) for _, uris in client.add_calls], [100, 100, 50])
        flattened = [uri for _, uris in client.add_calls for uri in uris]
        self.assertEqual(flattened, [f"spotify:track:id{i}" for i in range(250)])

    def test_exactly_one_full_chunk(self):
        client = FakeSpotifyClient()
        PlaylistBuilder(client).add_tracks("pl1", [f"id{i}" for i in range(MAX_TRACKS_PER_REQUEST)])
        self.assertEqual(len(client.add_calls), 1)

    def test_chunk_size_is_capped_at_spotify_maximum(self):
        self.assertEqual(PlaylistBuilder(FakeSpotifyClient(), chunk_size=500).chunk_size, MAX_TRACKS_PER_REQUEST)

    def test_failure_stops_at_first_failing_chunk(self):
        ids = [f"id{i}" for i in range(250)]
        client = FakeSpotifyClient(fail_on_add_call=2)

        with self.assertRaises(AddTracksError) as ctx:
            PlaylistBuilder(client).add_tracks("pl1", ids)

        self.assertEqual(len(client.add_calls), 2)
        self.assertEqual(ctx.exception.inserted, 100)
        self.assertEqual(ctx.exception.status_code, 502)


class TestPlaylistCreation(unittest.TestCase):
    def test_create_playlist_request_shape(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json={"id": "new-playlist"})

        client = SpotifyClient(TOKEN, http_client=_http_client(handler))
        playlist_id = PlaylistBuilder(client).create_playlist("user1", "Road trip")

        self.assertEqual(playlist_id, "new-playlist")
        request = seen[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(request.url.path, "/v1/users/user1/playlists")
        self.assertEqual(
            json.loads(request.content),
            {"name": "Road trip", "description": PLAYLIST_DESCRIPTION, "public": False},
        )

    def test_create_playlist_failure(self):
        client = SpotifyClient(TOKEN, http_client=_http_client(lambda r: httpx.Response(403, json={"error": "nope"})))
        with self.assertRaises(PlaylistCreateError) as ctx:
            PlaylistBuilder(client).create_playlist("user1", "Road trip")
        self.assertEqual(ctx.exception.status_code, 403)
        self.assertIn("nope", ctx.exception.body)

    def test_profile_failure(self):
        client = SpotifyClient(TOKEN, http_client=_http_client(lambda r: httpx.Response(401, json={"error": "expired"})))
        with self.assertRaises(ProfileError):
            PlaylistBuilder(client).current_user_id()

    def test_profile_without_id(self):
        with self.assertRaises(ProfileError):
            PlaylistBuilder(FakeSpotifyClient(user_id=None)).current_user_id()

    def test_add_tracks_request_shape(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json={"snapshot_id": "s1"})

        client = SpotifyClient(TOKEN, http_client=_http_client(handler))
        PlaylistBuilder(client).add_tracks("pl1", ["abc123", "xyz789"])

        self.assertEqual(seen[0].url.path, "/v1/playlists/pl1/tracks")
        self.assertEqual(json.loads(seen[0].content), {"uris": ["spotify:track:abc123", "spotify:track:xyz789"]})

    def test_build_creates_then_fills(self):
        client = FakeSpotifyClient(user_id="u9", playlist_id="p9")

        result = PlaylistBuilder(client).build("Mix", ["a", "b"])

        self.assertEqual(client.created, [("u9", "Mix", PLAYLIST_DESCRIPTION, False)])
        self.assertEqual(client.add_calls, [("p9", ["spotify:track:a", "spotify:track:b"])])
        self.assertEqual((result.playlist_id, result.name, result.track_count), ("p9", "Mix", 2))


if __name__ == "__main__":
    unittest.main(verbosity=2)
