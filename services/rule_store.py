# services/rule_store.py

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from db.models import RuleSet
from sqlalchemy.exc import IntegrityError

DEFAULT_RULE_SET = "loyalty"
DEFAULT_DESCRIPTION = "Airline Loyalty Program Discount Rules"
DEFAULT_VERSION = "1.0.0"


def load_rules_file(path) -> Dict:
    """Read a rule document ({"version", "description", "rules": [...]}) from disk."""
    with Path(path).open(encoding="utf-8") as f:
        document = json.load(f)
    if isinstance(document, list):
        # bare list of rules
        document = {"rules": document}
    return document


class RuleSetService:

    def __init__(self, db):
        self.db = db

    def get_rule_set(self, name: str = DEFAULT_RULE_SET) -> Optional[RuleSet]:
        return self.db.query(RuleSet).filter(RuleSet.name == name).first()

    def get_document(self, name: str = DEFAULT_RULE_SET) -> Optional[Dict]:
        rule_set = self.get_rule_set(name)
        if rule_set is None:
            return None
        return {
            "version": rule_set.version,
            "description": rule_set.description,
            "lastUpdated": (rule_set.updated_at or rule_set.created_at).isoformat() + "Z",
            "rules": rule_set.rules,
        }

    def get_rules(self, name: str = DEFAULT_RULE_SET) -> List[dict]:
        rule_set = self.get_rule_set(name)
        return list(rule_set.rules) if rule_set else []

    def save_rules(self, rules: List[dict], name: str = DEFAULT_RULE_SET,
                   description: str = DEFAULT_DESCRIPTION,
                   version: str = DEFAULT_VERSION) -> RuleSet:
        rule_set = self.get_rule_set(name)
        if rule_set is None:
            try:
                rule_set = RuleSet(name=name, description=description, version=version, rules=rules)
                self.db.add(rule_set)
                self.db.commit()
                self.db.refresh(rule_set)
                print(f"[RuleStore] Created rule set '{name}' with {len(rules)} rules")
                return rule_set
            except IntegrityError:
                self.db.rollback()
                # another writer created it first, overwrite theirs
                rule_set = self.get_rule_set(name)

        rule_set.rules = rules
        rule_set.description = description
        rule_set.version = version
        rule_set.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(rule_set)
        print(f"[RuleStore] Replaced rule set '{name}' with {len(rules)} rules")
        return rule_set

    def seed_from_file(self, path, name: str = DEFAULT_RULE_SET) -> RuleSet:
        """Populate an empty rule set from a JSON file; existing rule sets are left alone."""
        existing = self.get_rule_set(name)
        if existing is not None:
            return existing

        document = load_rules_file(path)
        print(f"[RuleStore] Seeding rule set '{name}' from {path}")
        return self.save_rules(
            document.get("rules", []),
            name=name,
            description=document.get("description", DEFAULT_DESCRIPTION),
            version=document.get("version", DEFAULT_VERSION),
        )
