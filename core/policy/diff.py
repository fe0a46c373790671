"""Compare two policy documents statement by statement."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core.models import PolicyDocument, Statement
from core.policy.serializer import canonical_statement, fingerprint, to_canonical_json


@dataclass(slots=True)
class PolicyDiff:
    before: PolicyDocument
    after: PolicyDocument

    def statement_delta(self) -> int:
        return len(self.after.statements) - len(self.before.statements)

    def added_sids(self) -> list[str]:
        before = set(self.before.sids())
        return [sid for sid in self.after.sids() if sid not in before]

    def removed_sids(self) -> list[str]:
        after = set(self.after.sids())
        return [sid for sid in self.before.sids() if sid not in after]

    def changed_sids(self) -> list[str]:
        before = self._by_sid(self.before)
        after = self._by_sid(self.after)
        return [
            sid
            for sid in after
            if sid in before and canonical_statement(before[sid]) != canonical_statement(after[sid])
        ]

    def fingerprints(self) -> tuple[int, int]:
        return fingerprint(to_canonical_json(self.before)), fingerprint(to_canonical_json(self.after))

    def has_drift(self) -> bool:
        return to_canonical_json(self.before) != to_canonical_json(self.after)

    def as_json(self) -> dict[str, Any]:
        before_fp, after_fp = self.fingerprints()
        return {
            "drift": self.has_drift(),
            "statementDelta": self.statement_delta(),
            "addedSids": self.added_sids(),
            "removedSids": self.removed_sids(),
            "changedSids": self.changed_sids(),
            "anonymousBefore": self._anonymous(self.before),
            "anonymousAfter": self._anonymous(self.after),
            "fingerprintBefore": before_fp,
            "fingerprintAfter": after_fp,
        }

    def as_markdown(self) -> str:
        report = self.as_json()
        lines = ["| Metric | Value |", "| --- | --- |"]
        for key, value in report.items():
            if isinstance(value, list):
                value = ", ".join(value) or "-"
            lines.append(f"| {key} | {value} |")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    @staticmethod
    def _by_sid(policy: PolicyDocument) -> dict[str, Statement]:
        mapping: dict[str, Statement] = {}
        for statement in policy.statements:
            if statement.sid and statement.sid not in mapping:
                mapping[statement.sid] = statement
        return mapping

    @staticmethod
    def _anonymous(policy: PolicyDocument) -> int:
        return sum(1 for statement in policy.statements if not statement.sid)


__all__ = ["PolicyDiff"]
