from typing import Optional

from sqlalchemy.orm import Session

from app.models.scenario import Scenario


def find_scenario_by_id(db: Session, scenario_id: Optional[int]) -> Optional[Scenario]:
    if scenario_id is None:
        return None
    return db.get(Scenario, scenario_id)


def create_scenario(db: Session, title: str, description: Optional[str] = None) -> Scenario:
    scenario = Scenario(title=title, description=description)
    db.add(scenario)
    db.commit()
    db.refresh(scenario)
    return scenario
