import json

import httpx

from hash_guesser.client import SearchClient, build_parser, run_command


class FakeServer:
    def __init__(self):
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, body))
        return httpx.Response(200, json={"status": "running"})


def make_client(server):
    return SearchClient("http://testserver", transport=httpx.MockTransport(server))


def test_start_posts_search_request():
    server = FakeServer()
    args = build_parser().parse_args([
        "start", "--hash", "ab" * 16, "--pattern", "[a-c]{3}",
        "--algorithm", "MD5", "--workers", "3", "--random", "--seed", "5",
    ])
    with make_client(server) as client:
        assert run_command(client, args) == {"status": "running"}

    method, path, body = server.requests[0]
    assert (method, path) == ("POST", "/search")
    assert body["pattern"] == "[a-c]{3}"
    assert body["mode"] == "random"
    assert body["workers"] == 3
    assert body["seed"] == 5


def test_control_commands_hit_their_routes():
    server = FakeServer()
    parser = build_parser()
    with make_client(server) as client:
        for command in ("pause", "resume", "stop", "status"):
            run_command(client, parser.parse_args([command]))
        run_command(client, parser.parse_args(["interval", "0.5"]))

    assert [(m, p) for m, p, _ in server.requests] == [
        ("POST", "/search/pause"),
        ("POST", "/search/resume"),
        ("POST", "/search/stop"),
        ("GET", "/search/status"),
        ("PUT", "/search/reporting-interval"),
    ]
    assert server.requests[-1][2] == {"seconds": 0.5}


def test_http_errors_raise():
    def reject(request):
        return httpx.Response(404, json={"detail": "No search has been started"})

    with SearchClient("http://testserver", transport=httpx.MockTransport(reject)) as client:
        try:
            client.status()
        except httpx.HTTPStatusError as e:
            assert e.response.status_code == 404
        else:
            raise AssertionError("expected HTTPStatusError")
