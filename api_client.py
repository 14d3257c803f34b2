"""
REST clients for the CashCompass budget API.
Budget recommendations and budget creation, plus a local recommendation
service that runs the 50/30/20 engine without a backend.
"""
from typing import Dict, Any, Optional

import requests

from recommendation import generate_recommendation


class APIError:
    """Common API error types and messages"""
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    UNAUTHORIZED = "unauthorized"
    VALIDATION_ERROR = "validation_error"
    SERVER_ERROR = "server_error"
    PARSING_ERROR = "parsing_error"
    UNKNOWN_ERROR = "unknown_error"

    @staticmethod
    def get_user_message(error_type: str) -> str:
        """Get user-friendly error messages"""
        messages = {
            APIError.NETWORK_ERROR: "🌐 **Network error.** Could not reach the CashCompass server. Check your connection and try again.",
            APIError.TIMEOUT: "⏱️ **The server took too long to respond.** Please try again.",
            APIError.UNAUTHORIZED: "🔑 **Your session has expired.** Please log in again.",
            APIError.VALIDATION_ERROR: "⚠️ **The server rejected some of your budget details.** Review them and try again.",
            APIError.SERVER_ERROR: "🛠️ **The server had a problem.** Your progress is saved; please try again shortly.",
            APIError.PARSING_ERROR: "⚠️ **Unexpected response from the server.** Please try again.",
            APIError.UNKNOWN_ERROR: "❓ **Unexpected error occurred.** Please try again.",
        }
        return messages.get(error_type, messages[APIError.UNKNOWN_ERROR])

    @staticmethod
    def classify(error: Exception) -> str:
        """Classify a requests exception into one of the error types"""
        if isinstance(error, requests.exceptions.Timeout):
            return APIError.TIMEOUT
        if isinstance(error, requests.exceptions.ConnectionError):
            return APIError.NETWORK_ERROR
        if isinstance(error, requests.exceptions.HTTPError):
            status = error.response.status_code if error.response is not None else None
            if status in (401, 403):
                return APIError.UNAUTHORIZED
            if status in (400, 422):
                return APIError.VALIDATION_ERROR
            if status is not None and status >= 500:
                return APIError.SERVER_ERROR
        if isinstance(error, ValueError):
            return APIError.PARSING_ERROR
        return APIError.UNKNOWN_ERROR


class BudgetServiceError(Exception):
    """A collaborator call failed; error_type is one of the APIError constants"""

    def __init__(self, error_type: str, message: str = ''):
        super().__init__(message or error_type)
        self.error_type = error_type

    @property
    def user_message(self) -> str:
        return APIError.get_user_message(self.error_type)


class BudgetAPIClient:
    """Thin requests wrapper around the monthly/annual budget endpoints"""

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        if self.token:
            headers['Authorization'] = f"Bearer {self.token}"
        return headers

    def _post(self, path: str, payload: Dict[str, Any]) -> Any:
        url = f"{self.base_url}{path}"
        print(f"DEBUG [BudgetAPIClient._post]: POST {url}")
        try:
            response = requests.post(url, json=payload, headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            error_type = APIError.classify(e)
            print(f"ERROR [BudgetAPIClient._post]: {path} failed ({error_type}): {e}")
            raise BudgetServiceError(error_type, str(e)) from e

        if not isinstance(body, dict) or not body.get('success', False) or 'data' not in body:
            message = body.get('message', '') if isinstance(body, dict) else ''
            print(f"ERROR [BudgetAPIClient._post]: {path} returned an unsuccessful envelope: {message}")
            raise BudgetServiceError(APIError.PARSING_ERROR, message)
        return body['data']

    def recommend(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """POST /monthly-budgets/recommendations"""
        data = self._post('/monthly-budgets/recommendations', request)
        if not isinstance(data, dict) or not isinstance(data.get('categories'), list):
            raise BudgetServiceError(APIError.PARSING_ERROR, "Recommendation response has no categories")
        return data

    def create_budget(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST /annual-budgets for yearly payloads, /monthly-budgets otherwise"""
        path = '/annual-budgets' if 'month' not in payload else '/monthly-budgets'
        return self._post(path, payload)


class LocalRecommendationService:
    """Runs the 50/30/20 engine in-process, same contract as BudgetAPIClient.recommend"""

    def recommend(self, request: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return generate_recommendation(
                request.get('income', 0),
                request.get('selectedCategories') or {},
                priority=request.get('priority'),
                profile=request.get('profile'),
            )
        except ValueError as e:
            raise BudgetServiceError(APIError.VALIDATION_ERROR, str(e)) from e
