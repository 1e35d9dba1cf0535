# tests/unit/client/test_unit_fingerprint.py — v1
"""Tests for client/fingerprint.py."""

from __future__ import annotations

from storesync.client.fingerprint import request_fingerprint


class TestRequestFingerprint:
    def test_shape(self):
        assert request_fingerprint("get", "/api/cart") == "GET:/api/cart:null"

    def test_param_order_irrelevant(self):
        a = request_fingerprint("GET", "/p", {"page": 1, "size": 20})
        b = request_fingerprint("GET", "/p", {"size": 20, "page": 1})
        assert a == b

    def test_distinct_params_differ(self):
        assert request_fingerprint("GET", "/p", {"page": 1}) != request_fingerprint(
            "GET", "/p", {"page": 2}
        )

    def test_trailing_slash_normalized(self):
        assert request_fingerprint("GET", "/api/cart/") == request_fingerprint(
            "GET", "/api/cart"
        )

    def test_method_distinguishes(self):
        assert request_fingerprint("GET", "/x") != request_fingerprint("DELETE", "/x")

    def test_auth_mode_distinguishes(self):
        public = request_fingerprint("GET", "/api/cart")
        private = request_fingerprint("GET", "/api/cart", authenticated=True)
        assert public != private
        assert private == "GET:/api/cart:null:auth"
