"""
Data Loader Script - Loads sample_data.json into the registry via the API.

Creates every course, then every student (enrolled by course code). The
requests are sent as an admin identity; create one first with
bootstrap_admin.py.

Usage:
    python load_data.py <admin-identity-id>                          # Uses default URL
    python load_data.py <admin-identity-id> http://localhost:8000     # Custom API URL
"""

import json
import sys
import os

import httpx


def main():
    if len(sys.argv) < 2 and not os.getenv("ADMIN_IDENTITY_ID"):
        print("Usage: python load_data.py <admin-identity-id> [api-url]")
        sys.exit(1)

    admin_id = sys.argv[1] if len(sys.argv) > 1 else os.getenv("ADMIN_IDENTITY_ID")
    api_url = sys.argv[2] if len(sys.argv) > 2 else os.getenv("API_URL", "http://localhost:8000")
    identity_header = os.getenv("IDENTITY_HEADER", "X-Identity-Id")

    data_file = os.path.join(os.path.dirname(os.path.abspath(__file__)), "sample_data.json")
    if not os.path.exists(data_file):
        print("Error: Could not find sample_data.json")
        sys.exit(1)

    print(f"Loading data from: {data_file}")
    with open(data_file, 'r') as f:
        data = json.load(f)

    created = {"courses": 0, "students": 0}
    skipped = {"courses": 0, "students": 0}
    course_ids = {}

    with httpx.Client(base_url=api_url, timeout=30.0,
                      headers={identity_header: admin_id}) as client:
        for course in data.get("courses", []):
            resp = client.post("/api/courses", json=course)
            if resp.status_code == 409:
                skipped["courses"] += 1
                print(f"  🔁 course {course['course_code']}: already exists")
                continue
            resp.raise_for_status()
            created["courses"] += 1
            print(f"  ✅ course {course['course_code']}")

        # Resolve codes to ids, including courses that already existed
        resp = client.get("/api/courses")
        resp.raise_for_status()
        for course in resp.json()["data"]:
            course_ids[course["course_code"]] = course["id"]

        for student in data.get("students", []):
            payload = {
                "name": student["name"],
                "email": student["email"],
                "course_id": course_ids.get((student.get("course_code") or "").upper()),
            }
            resp = client.post("/api/students", json=payload)
            if resp.status_code == 409:
                skipped["students"] += 1
                print(f"  🔁 student {student['email']}: already exists")
                continue
            resp.raise_for_status()
            created["students"] += 1
            print(f"  ✅ student {student['email']}")

    print()
    print("=" * 60)
    print("LOAD SUMMARY")
    print("=" * 60)
    print(f"  Courses created:   {created['courses']} (skipped {skipped['courses']})")
    print(f"  Students created:  {created['students']} (skipped {skipped['students']})")
    print("=" * 60)


if __name__ == "__main__":
    main()
