"""HTTP tests for phone/PIN sign-in and the session cookie."""

import pytest

from conftest import sign_up


class TestSignIn:
    def test_check_phone_unknown(self, client):
        response = client.post("/api/auth/check-phone", json={"phone": "9876543210"})
        assert response.status_code == 200
        assert response.json() == {"exists": False, "has_pin": False}

    def test_send_otp(self, client, otp_codes):
        response = client.post("/api/auth/send-otp", json={"phone": "9876543210"})
        assert response.status_code == 200
        assert response.json() == {"success": True, "status": "pending"}

    def test_verify_otp_creates_profile(self, client, otp_codes):
        otp_codes["+919876543210"] = "123456"

        response = client.post("/api/auth/verify-otp", json={"phone": "9876543210", "code": "123456"})

        assert response.status_code == 200
        body = response.json()
        assert body["requires_profile_complete"] is True
        assert body["user"]["phone"] == "+919876543210"
        assert body["user"]["has_pin"] is False

    def test_verify_otp_wrong_code(self, client, otp_codes):
        otp_codes["+919876543210"] = "123456"
        response = client.post("/api/auth/verify-otp", json={"phone": "9876543210", "code": "000000"})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid verification code"

    @pytest.mark.usefixtures("fast_pin_hash")
    def test_setup_pin_sets_session_cookie(self, client, otp_codes):
        sign_up(client, otp_codes)

        assert "session" in client.cookies
        me = client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.json()["phone"] == "+919876543210"
        assert me.json()["has_pin"] is True

    @pytest.mark.usefixtures("fast_pin_hash")
    def test_verify_pin_login(self, client, otp_codes):
        sign_up(client, otp_codes)
        client.cookies.clear()

        response = client.post("/api/auth/verify-pin", json={"phone": "+919876543210", "pin": "4321"})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Login successful",
            "redirect_to": "/auth/complete-profile",
        }
        cookie = response.headers["set-cookie"]
        assert "HttpOnly" in cookie
        assert "samesite=lax" in cookie.lower()
        assert "Max-Age=2592000" in cookie
        assert "; secure" not in cookie.lower()
        assert client.get("/api/auth/me").status_code == 200

    @pytest.mark.usefixtures("fast_pin_hash")
    def test_verify_pin_wrong_pin(self, client, otp_codes):
        sign_up(client, otp_codes)
        client.cookies.clear()

        response = client.post("/api/auth/verify-pin", json={"phone": "9876543210", "pin": "0000"})

        assert response.status_code == 401
        assert response.json() == {"message": "Invalid PIN", "type": "authentication_error"}
        assert "session" not in client.cookies

    @pytest.mark.usefixtures("fast_pin_hash")
    def test_verify_pin_overlong_pin(self, client, otp_codes):
        sign_up(client, otp_codes)
        client.cookies.clear()

        response = client.post("/api/auth/verify-pin", json={"phone": "9876543210", "pin": "1" * 200})

        assert response.status_code == 401
        assert response.json() == {"message": "Invalid PIN", "type": "authentication_error"}

    @pytest.mark.usefixtures("fast_pin_hash")
    def test_production_session_cookie_is_secure(self, client, otp_codes, config):
        config.production = True
        otp_codes["+919876543210"] = "123456"
        client.post("/api/auth/verify-otp", json={"phone": "9876543210", "code": "123456"})

        response = client.post("/api/auth/setup-pin", json={"phone": "9876543210", "pin": "4321"})

        assert response.status_code == 200
        cookie = response.headers["set-cookie"]
        assert cookie.startswith("session=")
        assert "; Secure" in cookie
        assert "HttpOnly" in cookie

    @pytest.mark.usefixtures("fast_pin_hash")
    def test_reset_pin_requires_code(self, client, otp_codes):
        sign_up(client, otp_codes)
        otp_codes["+919876543210"] = "654321"

        bad = client.post("/api/auth/reset-pin", json={"phone": "9876543210", "code": "111111", "new_pin": "2468"})
        good = client.post("/api/auth/reset-pin", json={"phone": "9876543210", "code": "654321", "new_pin": "2468"})

        assert bad.status_code == 400
        assert good.status_code == 200
        login = client.post("/api/auth/verify-pin", json={"phone": "9876543210", "pin": "2468"})
        assert login.status_code == 200


class TestSession:
    def test_me_without_cookie(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json() == {"message": "Not authenticated", "type": "authentication_error"}

    def test_me_with_tampered_cookie(self, signed_in):
        header, payload, signature = signed_in.cookies["session"].split(".")
        payload = payload[:5] + ("A" if payload[5] != "A" else "B") + payload[6:]
        signed_in.cookies.clear()

        response = signed_in.get("/api/auth/me", headers={"Cookie": f"session={header}.{payload}.{signature}"})
        assert response.status_code == 401

    def test_logout_clears_cookie(self, signed_in):
        response = signed_in.post("/api/auth/logout")

        assert response.status_code == 200
        assert "session" not in signed_in.cookies
        assert signed_in.get("/api/auth/me").status_code == 401


class TestProfileCompletion:
    def test_complete_profile(self, signed_in):
        response = signed_in.post("/api/profile/complete", json={"name": "Asha Rao", "city": "Pune"})

        assert response.status_code == 200
        assert response.json()["profile_complete"] is True
        assert response.json()["status"] == "pending"

    def test_login_redirects_after_completion(self, signed_in):
        signed_in.post("/api/profile/complete", json={"name": "Asha Rao"})
        signed_in.cookies.clear()

        response = signed_in.post("/api/auth/verify-pin", json={"phone": "9876543210", "pin": "4321"})
        assert response.json()["redirect_to"] == "/auth/approval-pending"

    def test_update_profile(self, signed_in):
        signed_in.post("/api/profile/complete", json={"name": "Asha Rao", "city": "Pune"})

        response = signed_in.post("/api/profile/update", json={"agency_name": "Rao Realty", "working_regions": ["Baner"]})

        assert response.status_code == 200
        body = response.json()
        assert body["agency_name"] == "Rao Realty"
        assert body["working_regions"] == ["Baner"]
        assert body["name"] == "Asha Rao"
        assert body["city"] == "Pune"
        assert signed_in.get("/api/auth/me").json()["agency_name"] == "Rao Realty"

    def test_update_profile_rejects_blank_name(self, signed_in):
        response = signed_in.post("/api/profile/update", json={"name": ""})
        assert response.status_code == 400
        assert response.json()["type"] == "validation_error"

    def test_update_profile_requires_session(self, client):
        assert client.post("/api/profile/update", json={"bio": "x"}).status_code == 401


class TestRequestValidation:
    def test_missing_field(self, client):
        response = client.post("/api/auth/check-phone", json={})
        assert response.status_code == 400
        assert response.json() == {"message": "phone: Field required", "type": "validation_error"}

    def test_invalid_phone(self, client):
        response = client.post("/api/auth/check-phone", json={"phone": "12"})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid phone number"


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
