import unittest

import httpx

from tests.helpers import make_api_client
from youtube_api.credentials import APIKeyCredentials, OAuthCredentials
from youtube_api.exceptions import APIRequestError, AuthorizationError
from youtube_api.token_manager import TokenInfo


def _paged_handler(pages):
    """Serve pages keyed by incoming pageToken ("" for the first request)."""

    def handler(request: httpx.Request) -> httpx.Response:
        cursor = request.url.params.get("pageToken", "")
        items, next_token = pages[cursor]
        body = {"kind": "youtube#playlistItemListResponse", "items": items}
        if next_token:
            body["nextPageToken"] = next_token
        return httpx.Response(200, json=body)

    return handler


def _items(prefix, start, count):
    return [{"id": f"{prefix}{i}", "snippet": {"position": i}} for i in range(start, start + count)]


def _bearer():
    return OAuthCredentials(TokenInfo(access_token="ya29.test"), auto_refresh=False)


class TestPlaylistItemPagination(unittest.TestCase):
    def test_three_pages_of_120_items_use_three_requests(self):
        pages = {
            "": (_items("item", 0, 50), "a"),
            "a": (_items("item", 50, 50), "b"),
            "b": (_items("item", 100, 20), ""),
        }
        client, recorder = make_api_client(_paged_handler(pages), _bearer())

        items = client.list_playlist_items("PL123")

        self.assertEqual(len(items), 120)
        self.assertEqual([it["id"] for it in items], [f"item{i}" for i in range(120)])
        self.assertEqual(len(recorder.requests), 3)

        first, second, third = recorder.requests
        self.assertNotIn("pageToken", first.url.params)
        self.assertEqual(second.url.params["pageToken"], "a")
        self.assertEqual(third.url.params["pageToken"], "b")
        for req in recorder.requests:
            self.assertEqual(req.url.path, "/youtube/v3/playlistItems")
            self.assertEqual(req.url.params["playlistId"], "PL123")
            self.assertEqual(req.url.params["maxResults"], "50")
            self.assertEqual(req.url.params["part"], "snippet,contentDetails")
            self.assertEqual(req.headers["Authorization"], "Bearer ya29.test")

    def test_uneven_pages_are_concatenated_in_request_order(self):
        pages = {
            "": (_items("x", 0, 7), "p2"),
            "p2": (_items("x", 7, 1), "p3"),
            "p3": (_items("x", 8, 50), "p4"),
            "p4": ([], ""),
        }
        client, recorder = make_api_client(_paged_handler(pages), _bearer())

        items = client.list_playlist_items("PLuneven")

        self.assertEqual([it["id"] for it in items], [f"x{i}" for i in range(58)])
        self.assertEqual(len(recorder.requests), 4)

    def test_single_page_without_next_token(self):
        client, recorder = make_api_client(_paged_handler({"": (_items("only", 0, 3), None)}), _bearer())
        self.assertEqual(len(client.list_playlist_items("PLone")), 3)
        self.assertEqual(len(recorder.requests), 1)

    def test_empty_playlist_returns_empty_list(self):
        client, _ = make_api_client(_paged_handler({"": ([], None)}), _bearer())
        self.assertEqual(client.list_playlist_items("PLempty"), [])

    def test_blank_playlist_id_is_rejected(self):
        client, recorder = make_api_client(_paged_handler({}), _bearer())
        with self.assertRaises(ValueError):
            client.list_playlist_items("  ")
        self.assertEqual(recorder.requests, [])

    def test_page_size_comes_from_config_and_is_capped(self):
        client, recorder = make_api_client(
            _paged_handler({"": (_items("i", 0, 1), None)}), _bearer(), config={"youtube_page_size": 500}
        )
        client.list_playlist_items("PLcap")
        self.assertEqual(recorder.requests[0].url.params["maxResults"], "50")

        client, recorder = make_api_client(
            _paged_handler({"": (_items("i", 0, 1), None)}), _bearer(), config={"youtube_page_size": 10}
        )
        client.list_playlist_items("PLsmall")
        self.assertEqual(recorder.requests[0].url.params["maxResults"], "10")


class TestPaginationFailures(unittest.TestCase):
    def test_failed_page_aborts_without_partial_result(self):
        error_body = {
            "error": {
                "code": 403,
                "message": "The request cannot be completed because you have exceeded your quota.",
                "errors": [{"reason": "quotaExceeded", "domain": "youtube.quota"}],
            }
        }

        def handler(request):
            if request.url.params.get("pageToken") == "a":
                return httpx.Response(403, json=error_body)
            return httpx.Response(200, json={"items": _items("i", 0, 50), "nextPageToken": "a"})

        client, recorder = make_api_client(handler, _bearer())

        result = None
        with self.assertRaises(APIRequestError) as ctx:
            result = client.list_playlist_items("PL123")

        self.assertIsNone(result)
        self.assertEqual(ctx.exception.status_code, 403)
        self.assertEqual(ctx.exception.reason, "quotaExceeded")
        self.assertIn("quotaExceeded", ctx.exception.body)
        # No retry.
        self.assertEqual(len(recorder.requests), 2)

    def test_transport_error_propagates_unchanged(self):
        boom = httpx.ConnectError("connection refused")

        def handler(request):
            raise boom

        client, recorder = make_api_client(handler, _bearer())
        with self.assertRaises(httpx.ConnectError) as ctx:
            client.list_my_playlists()
        self.assertIs(ctx.exception, boom)
        self.assertEqual(len(recorder.requests), 1)

    def test_unauthorized_is_reported_with_status(self):
        client, _ = make_api_client(lambda r: httpx.Response(401, text="Invalid Credentials"), _bearer())
        with self.assertRaises(APIRequestError) as ctx:
            client.list_playlist_items("PL1")
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertIsNone(ctx.exception.reason)


class TestMyPlaylists(unittest.TestCase):
    def test_lists_mine_across_pages(self):
        def handler(request):
            if request.url.params.get("pageToken") == "next":
                return httpx.Response(200, json={"items": [{"id": "PL3"}]})
            return httpx.Response(200, json={"items": [{"id": "PL1"}, {"id": "PL2"}], "nextPageToken": "next"})

        client, recorder = make_api_client(handler, _bearer())
        playlists = client.list_my_playlists()

        self.assertEqual([p["id"] for p in playlists], ["PL1", "PL2", "PL3"])
        for req in recorder.requests:
            self.assertEqual(req.url.path, "/youtube/v3/playlists")
            self.assertEqual(req.url.params["mine"], "true")
            self.assertEqual(req.url.params["maxResults"], "50")

    def test_api_key_cannot_list_mine(self):
        client, recorder = make_api_client(lambda r: httpx.Response(200, json={}), APIKeyCredentials("AIza-test"))
        with self.assertRaises(AuthorizationError):
            client.list_my_playlists()
        self.assertEqual(recorder.requests, [])


class TestApiKeyCredentials(unittest.TestCase):
    def test_key_sent_as_query_parameter(self):
        client, recorder = make_api_client(
            lambda r: httpx.Response(200, json={"items": [{"id": "a"}]}), APIKeyCredentials("AIza-test")
        )
        items = client.list_playlist_items("PLpublic")

        self.assertEqual(items, [{"id": "a"}])
        req = recorder.requests[0]
        self.assertEqual(req.url.params["key"], "AIza-test")
        self.assertNotIn("Authorization", req.headers)


class TestSinglePages(unittest.TestCase):
    def test_playlist_items_page_passes_cursor(self):
        client, recorder = make_api_client(
            lambda r: httpx.Response(200, json={"items": [], "nextPageToken": "z"}), _bearer()
        )
        page = client.playlist_items_page("PL9", page_token="cursor")
        self.assertEqual(page["nextPageToken"], "z")
        self.assertEqual(recorder.requests[0].url.params["pageToken"], "cursor")

    def test_playlists_page_omits_empty_cursor(self):
        client, recorder = make_api_client(lambda r: httpx.Response(200, json={"items": []}), _bearer())
        client.playlists_page(page_token="")
        self.assertNotIn("pageToken", recorder.requests[0].url.params)


if __name__ == "__main__":
    unittest.main(verbosity=2)
