# services/rule_reload.py

from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler

from services.rule_store import DEFAULT_RULE_SET, RuleSetService

RELOAD_JOB_ID = "rules:reload"


def build_scheduler() -> BackgroundScheduler:
    # the reload job carries a live engine, which cannot be pickled into a persistent store
    return BackgroundScheduler(
        jobstores={"default": MemoryJobStore()},
        job_defaults={"coalesce": True, "max_instances": 1},
        timezone="UTC",
    )


def reload_rules(engine, session_factory, name: str = DEFAULT_RULE_SET) -> bool:
    """
    Pull the stored rule set into a running engine.

    Fired periodically by APScheduler so every API worker picks up rules
    saved through any other worker. On failure the engine keeps the rule
    set it already has.
    """
    db = session_factory()
    try:
        rule_set = RuleSetService(db).get_rule_set(name)
        if rule_set is None:
            print(f"[Reload] No stored rule set '{name}', keeping current rules")
            return False

        if list(rule_set.rules) == engine.get_rules():
            return False

        engine.load_rules(rule_set.rules)
        print(f"[Reload] Rule set '{name}' reloaded → {len(rule_set.rules)} rules")
        return True

    except Exception as e:
        print(f"[Reload] Error reloading '{name}': {e}")
        return False
    finally:
        db.close()


def schedule_reload(scheduler, engine, session_factory, interval_seconds: int,
                    name: str = DEFAULT_RULE_SET):
    scheduler.add_job(
        reload_rules,
        trigger="interval",
        seconds=interval_seconds,
        args=[engine, session_factory, name],
        id=RELOAD_JOB_ID,
        replace_existing=True
    )
    print(f"[Scheduler] Rule reload every {interval_seconds}s for '{name}'")
