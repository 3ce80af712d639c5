"""
API Performance Testing Script
Times the read endpoints of the construction management API against a running server

Usage:
    API_USERNAME=admin API_PASSWORD=secret python test_api_performance.py [project_id]

This script:
1. Logs in and reuses the JWT for every request
2. Measures response time for each endpoint
3. Prints a summary and saves the raw results as JSON
"""

import json
import os
import sys
import time
from datetime import date, datetime
from typing import Dict, List, Optional

import requests

BASE_URL = os.environ.get('API_BASE_URL', 'http://127.0.0.1:8000/api/v1')
USERNAME = os.environ.get('API_USERNAME', '')
PASSWORD = os.environ.get('API_PASSWORD', '')
SLOW_THRESHOLD_MS = 1000


class APITester:
    """Class to handle API testing and performance measurement"""

    def __init__(self, base_url: str):
        self.base_url = base_url
        self.results: List[Dict] = []
        self.session = requests.Session()

    def authenticate(self, username: str, password: str) -> bool:
        print(f"🔐 Authenticating as {username}...")
        try:
            response = self.session.post(
                f"{self.base_url}/auth/login/",
                json={"username": username, "password": password},
                timeout=10
            )
        except requests.exceptions.RequestException as e:
            print(f"❌ Authentication error: {e}")
            return False

        if response.status_code != 200:
            print(f"❌ Authentication failed: {response.status_code} {response.text[:200]}")
            return False

        self.session.headers.update({'Authorization': f"Bearer {response.json()['access']}"})
        print("✅ Authentication successful!")
        return True

    def test_endpoint(self, name: str, endpoint: str, params: Optional[Dict] = None) -> Dict:
        """Call one endpoint and record status, timing and payload size"""
        url = f"{self.base_url}{endpoint}"
        result = {
            'name': name,
            'endpoint': endpoint,
            'params': params or {},
            'timestamp': datetime.now().isoformat(),
        }
        try:
            start_time = time.perf_counter()
            response = self.session.get(url, params=params, timeout=30)
            result['response_time_ms'] = round((time.perf_counter() - start_time) * 1000, 2)
            result['status_code'] = response.status_code
            result['success'] = response.status_code == 200
            result['bytes'] = len(response.content)
            if not result['success']:
                result['error'] = response.text[:500]
        except requests.exceptions.Timeout:
            result.update(status_code=0, response_time_ms=30000, success=False, error='Request timeout (30s)')
        except requests.exceptions.RequestException as e:
            result.update(status_code=0, response_time_ms=0, success=False, error=str(e))

        self.results.append(result)
        self.print_result(result)
        return result

    def print_result(self, result: Dict):
        status_icon = "✅" if result['success'] else "❌"
        slow = " 🐢" if result['response_time_ms'] > SLOW_THRESHOLD_MS else ""
        print(f"{status_icon} {result['name']}: {result['status_code']} in {result['response_time_ms']}ms{slow}")
        if not result['success'] and result.get('error'):
            print(f"   Error: {result['error'][:200]}")

    def generate_report(self):
        successful = [r for r in self.results if r['success']]
        print("\n" + "=" * 80)
        print("📊 API PERFORMANCE TEST REPORT")
        print("=" * 80)
        print(f"Base URL: {self.base_url}")
        print(f"Total: {len(self.results)}  Successful: {len(successful)}  Failed: {len(self.results) - len(successful)}")
        if not successful:
            return
        average = sum(r['response_time_ms'] for r in successful) / len(successful)
        print(f"Average Response Time: {average:.2f}ms")
        print("\nSlowest endpoints:")
        for r in sorted(successful, key=lambda x: x['response_time_ms'], reverse=True)[:5]:
            print(f"   {r['response_time_ms']:>9.2f}ms  {r['name']}")

    def save_results(self, filename: str = "api_test_results.json"):
        with open(filename, 'w', encoding='utf-8') as f:
            json.dump({'base_url': self.base_url, 'results': self.results}, f, indent=2, ensure_ascii=False)
        print(f"\n💾 Results saved to {filename}")


def endpoints_for(project_id: Optional[int]):
    """Read endpoints grouped the way the frontend screens load them"""
    today = date.today().isoformat()
    month_start = date.today().replace(day=1).isoformat()
    endpoints = [
        ("Auth - Current User", "/auth/me/", None),
        ("Projects - List", "/projects/", None),
        ("Projects - With Stats", "/projects/with-stats/", None),
        ("Workers - List", "/workers/", None),
        ("Workers - Types", "/worker-types/", None),
        ("Attendance - Today", "/worker-attendance/", {"date": today}),
        ("Suppliers - List", "/suppliers/", None),
        ("Suppliers - Statistics", "/suppliers/statistics/", None),
        ("Materials - List", "/materials/", None),
        ("Material Purchases - Page 1", "/material-purchases/", {"page": 1}),
        ("Equipment - List", "/equipment/", None),
        ("Equipment - Predictive Maintenance", "/equipment/predictive-maintenance/", None),
        ("Equipment - Recommendations", "/equipment/recommendations/", None),
        ("Notifications - List", "/notifications/", None),
        ("Notifications - Stats", "/notifications/stats/", None),
        ("Reports - Workers Settlement", "/reports/workers-settlement/", {"project_ids": "all"}),
        ("Reports - Unified Income", "/reports/unified-transactions/", {"type": "income"}),
        ("Audit Logs", "/audit-logs/", None),
        ("Search - Global", "/search/", {"q": "a"}),
    ]
    if project_id:
        endpoints += [
            ("Project - Stats", f"/projects/{project_id}/stats/", None),
            ("Project - Daily Summary", f"/projects/{project_id}/daily-summary/{today}/", None),
            ("Project - Previous Balance", f"/projects/{project_id}/previous-balance/{today}/", None),
            ("Reports - Daily Expenses", "/reports/daily-expenses/", {"project": project_id, "date": today}),
            ("Reports - Daily Range", "/reports/daily-expenses-range/",
             {"project": project_id, "date_from": month_start, "date_to": today}),
            ("Reports - Project Summary", "/reports/project-summary/", {"project": project_id}),
            ("Reports - Advanced Expenses", "/reports/advanced/",
             {"project": project_id, "report_type": "expenses", "date_from": month_start, "date_to": today}),
        ]
    return endpoints


def main():
    if not USERNAME or not PASSWORD:
        print("⚠️ Set API_USERNAME and API_PASSWORD before running")
        sys.exit(1)

    project_id = int(sys.argv[1]) if len(sys.argv) > 1 else None
    tester = APITester(BASE_URL)
    if not tester.authenticate(USERNAME, PASSWORD):
        sys.exit(1)

    print("\n🚀 Testing endpoints...\n")
    for name, endpoint, params in endpoints_for(project_id):
        tester.test_endpoint(name, endpoint, params)

    tester.generate_report()
    tester.save_results()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\n⚠️ Tests interrupted by user")
        sys.exit(0)
