"""
Print a workspace or project trust ledger from a running server.

Usage:
    python scripts/show_trust_ledger.py <token> workspace <workspace_id> [page]
    python scripts/show_trust_ledger.py <token> project <project_id> [--force]
"""
import sys

import httpx

BASE = "http://localhost:8000/api/v1"


def print_scores(rows):
    print("\nTrust scores:")
    for row in rows:
        arrow = {"up": "^", "down": "v"}.get(row["trend"], "=")
        print(f"  {row['actor']:<28} {row['score']:>5}  (prev {row['previous_score']}) {arrow}")


def print_activities(items):
    print(f"\nActivities ({len(items)}):")
    for item in items:
        mark = "x" if item["verified"] else " "
        print(f"  [{mark}] {item['timestamp'][:16]} {item['trust_points']:+d}  {item['action']}")
        print(f"        {item['description']}")


def main():
    if len(sys.argv) < 4 or sys.argv[2] not in ("workspace", "project"):
        print(__doc__)
        sys.exit(1)

    token, kind, scope_id = sys.argv[1:4]
    headers = {"Authorization": f"Bearer {token}"}
    client = httpx.Client(timeout=60)

    if kind == "workspace":
        page = sys.argv[4] if len(sys.argv) > 4 else "1"
        r = client.get(f"{BASE}/workspaces/{scope_id}/trust-ledger", params={"page": page}, headers=headers)
    else:
        params = {"force": "true"} if "--force" in sys.argv else {}
        r = client.get(f"{BASE}/workspaces/projects/{scope_id}/trust-ledger", params=params, headers=headers)

    print(f"Status: {r.status_code}  request id: {r.headers.get('X-Request-ID')}")
    if r.status_code != 200:
        print(f"  Body: {r.text}")
        sys.exit(1)

    data = r.json()
    if kind == "project":
        print(f"Project: {data['project']['name']}")
    print_activities(data["activities"])
    print_scores(data["trust_scores"])

    if kind == "workspace":
        print("\nInsights:")
        for insight in data["insights"]:
            print(f"  ({insight['type']}/{insight['priority']}) {insight['title']}: {insight['description']}")
        print("\nCategories:")
        for category in data["categories"]:
            print(f"  {category['name']:<14} {category['score']:>3}/{category['max_score']}  {category['trend']}")
        p = data["pagination"]
        print(f"\nPage {p['page']} of {p['total_pages']} ({p['total_items']} entries)")


if __name__ == "__main__":
    main()
