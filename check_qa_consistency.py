#!/usr/bin/env python3
"""
Script to check invariants in questions.json.
Verifies unique ids, non-negative like counters, and that every answered
question carries its response.

Usage:
    python check_qa_consistency.py [path]          # Check only
    python check_qa_consistency.py [path] --fix    # Check and fix errors
"""

import sys

import config
from qa_models import QuestionStatus
from qa_store import JsonFileBackend, QuestionStore, ReadState


def check(collection, fix_mode=False):
    """Return (errors, warnings, fixes_made) for a loaded collection."""
    errors = []
    warnings = []
    fixes_made = 0

    seen_ids = set()
    for q in collection.questions:
        label = f"Question [{q.id}]"

        if q.id in seen_ids:
            errors.append(f"{label} id is used by more than one question")
        seen_ids.add(q.id)

        answer_ids = [a.id for a in q.answers]
        if len(answer_ids) != len(set(answer_ids)):
            errors.append(f"{label} has duplicate answer ids")

        if q.likes < 0:
            errors.append(f"{label} has negative likes ({q.likes})")
            if fix_mode:
                q.likes = 0
                fixes_made += 1
                print(f"  FIXED: reset likes of {label} to 0")

        if q.status is QuestionStatus.ANSWERED and (q.response is None or q.responded_at is None):
            errors.append(f"{label} is answered but has no response")
            if fix_mode:
                owner_answers = [a for a in q.answers if a.is_owner]
                if owner_answers:
                    q.response = owner_answers[-1].content
                    q.responded_at = owner_answers[-1].date
                else:
                    q.status = QuestionStatus.PENDING
                    q.response = None
                    q.responded_at = None
                fixes_made += 1
                print(f"  FIXED: repaired response fields of {label}")

        if not isinstance(q.question, str) or not q.question.strip():
            warnings.append(f"{label} has empty question text")
        if q.status is QuestionStatus.PENDING and q.answers and any(a.is_owner for a in q.answers):
            warnings.append(f"{label} has an owner answer but is still pending")

    return errors, warnings, fixes_made


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    fix_mode = '--fix' in argv
    paths = [a for a in argv if not a.startswith('--')]
    store_path = paths[0] if paths else str(config.QUESTIONS_FILE)

    print("=" * 60)
    print("Question Store Consistency Check")
    if fix_mode:
        print("MODE: FIX (will repair errors)")
    else:
        print("MODE: CHECK ONLY (use --fix to repair)")
    print("=" * 60)

    result = JsonFileBackend(store_path).read()
    if result.state is ReadState.ABSENT:
        print(f"ERROR: {store_path} not found!")
        return False
    if result.state is ReadState.CORRUPT:
        print(f"ERROR: {store_path} is unreadable: {result.error}")
        return False

    collection = result.collection
    total_answers = sum(len(q.answers) for q in collection.questions)
    print(f"Loaded {len(collection.questions)} questions and {total_answers} answers\n")

    errors, warnings, fixes_made = check(collection, fix_mode)

    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)

    if errors:
        print(f"\nERRORS ({len(errors)}):")
        for err in errors:
            print(f"  - {err}")
    else:
        print("\nNo invariant violations found!")

    if warnings:
        print(f"\nWARNINGS ({len(warnings)}):")
        for warn in warnings[:20]:  # Limit display
            print(f"  - {warn}")
        if len(warnings) > 20:
            print(f"  ... and {len(warnings) - 20} more warnings")

    print(f"\nSummary:")
    print(f"  Total questions: {len(collection.questions)}")
    print(f"  Total answers: {total_answers}")
    print(f"  Errors: {len(errors)}")
    print(f"  Warnings: {len(warnings)}")
    print(f"  Fixes made: {fixes_made}")

    if fix_mode and fixes_made > 0:
        print(f"\nSaving {fixes_made} fixes to {store_path}...")
        QuestionStore(store_path).save(collection)
        print("Saved!")

    return len(errors) == 0


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
