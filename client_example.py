"""
Minimal Python client for the grading API.
Requires: pip install requests
Usage:
  python client_example.py --host http://127.0.0.1:8000 --user admin --password secret --class-id 1 --student 1 --term T1 --year 2025
  python client_example.py ... --class-id 1 --term T1 --year 2025 --batch
"""

import argparse
import json

import requests


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--host", default="http://127.0.0.1:8000")
    parser.add_argument("--user", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--class-id", type=int, required=True)
    parser.add_argument("--student", type=int)
    parser.add_argument("--term", default="T1")
    parser.add_argument("--year", required=True, help="Academic year, e.g. 2025")
    parser.add_argument("--batch", action="store_true", help="Compile report cards for the whole class")
    args = parser.parse_args()

    session = requests.Session()
    # Basic auth keeps the example short; use token auth in production
    session.auth = (args.user, args.password)

    resp = session.get(
        f"{args.host}/api/classes/{args.class_id}/analytics/",
        params={"term": args.term, "academic_year": args.year},
    )
    resp.raise_for_status()
    analytics = resp.json()
    print(
        f"Class {args.class_id}: {analytics['total_assessments']} assessments, "
        f"overall {analytics['overall_performance_level']}, top strand {analytics['top_performing_strand']}"
    )

    if args.student:
        resp = session.get(
            f"{args.host}/api/students/{args.student}/report-card/",
            params={"class_id": args.class_id, "term": args.term, "academic_year": args.year},
        )
        resp.raise_for_status()
        print(json.dumps(resp.json(), indent=2))

    if args.batch:
        resp = session.post(
            f"{args.host}/api/report-cards/batch/",
            json={"class_id": args.class_id, "term": args.term, "academic_year": args.year},
        )
        resp.raise_for_status()
        payload = resp.json()
        if resp.status_code == 202:
            print(f"Batch queued, task_id={payload['task_id']}")
            print("Progress is pushed on ws/grading/metrics/")
        else:
            print(f"Compiled {payload['compiled']} report cards, {payload['failed']} failed")


if __name__ == "__main__":
    main()
