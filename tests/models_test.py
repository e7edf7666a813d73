import unittest

from jurl.errors import RequestValidationError
from jurl.models import (
    NavigationResponse,
    OutputMode,
    RenderRequest,
    merge_headers,
    screenshot_format_for,
)


class TestRenderRequest(unittest.TestCase):
    def test_defaults(self):
        request = RenderRequest(url="https://example.com")
        self.assertEqual(request.method, "GET")
        self.assertFalse(request.follow_redirects)
        self.assertIs(request.output_mode, OutputMode.HTML)
        self.assertIsNone(request.screenshot_format)

    def test_normalizes_method_and_headers(self):
        request = RenderRequest(url="https://example.com", method=" post ", headers=[("Accept", "a"), ("accept", "b")])
        self.assertEqual(request.method, "POST")
        self.assertEqual(request.headers, (("Accept", "a"), ("accept", "b")))

    def test_screenshot_and_text_format_are_exclusive(self):
        with self.assertRaises(RequestValidationError) as cm:
            RenderRequest(url="https://example.com", output_mode=OutputMode.TEXT, screenshot_path="a.png")
        self.assertEqual(cm.exception.exit_code, 2)

    def test_screenshot_requires_path(self):
        with self.assertRaises(RequestValidationError):
            RenderRequest(url="https://example.com", output_mode=OutputMode.SCREENSHOT)

    def test_screenshot_requires_js(self):
        with self.assertRaises(RequestValidationError):
            RenderRequest(url="https://example.com", output_mode=OutputMode.SCREENSHOT,
                          screenshot_path="a.png", render_js=False)

    def test_rejects_bad_inputs(self):
        bad = [
            dict(url="example.com"),
            dict(url="ftp://example.com"),
            dict(url="https://"),
            dict(url="https://example.com", timeout=0),
            dict(url="https://example.com", timeout=-3),
            dict(url="https://example.com", timeout=float("inf")),
            dict(url="https://example.com", timeout=float("nan")),
            dict(url="https://example.com", method="GE T"),
            dict(url="https://example.com", headers=[("Bad Name", "x")]),
            dict(url="https://example.com", wait_selector="  "),
            dict(url="https://example.com", wait_until="idle"),
            dict(url="https://example.com", browser="opera"),
            dict(url="https://example.com", full_page=True),
        ]
        for kwargs in bad:
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(RequestValidationError):
                    RenderRequest(**kwargs)

    def test_file_urls_are_accepted(self):
        request = RenderRequest(url="file:///tmp/page.html")
        self.assertEqual(request.url, "file:///tmp/page.html")

    def test_request_is_immutable(self):
        request = RenderRequest(url="https://example.com")
        with self.assertRaises(Exception):
            request.url = "https://other.example"


class TestHelpers(unittest.TestCase):
    def test_screenshot_format_inference(self):
        self.assertEqual(screenshot_format_for("a.png"), "png")
        self.assertEqual(screenshot_format_for("a.jpeg"), "jpeg")
        self.assertEqual(screenshot_format_for("shot"), "png")

    def test_merge_headers_keeps_first_spelling_and_order(self):
        merged = merge_headers((("X-B", "1"), ("X-A", "2"), ("x-b", "3")))
        self.assertEqual(list(merged.items()), [("X-B", "1, 3"), ("X-A", "2")])

    def test_response_reason(self):
        self.assertEqual(NavigationResponse(url="u", final_url="u", status=404).reason, "Not Found")
        self.assertEqual(NavigationResponse(url="u", final_url="u", status=799).reason, "")
        self.assertEqual(NavigationResponse(url="u", final_url="u").reason, "")


if __name__ == "__main__":
    unittest.main()
