#!/usr/bin/env python3
"""
Seed script to create demo accounts, dashboard KPIs, project tasks and website statistics.
Run with: python -m scripts.seed_demo_data
"""

import sys
import os
from datetime import date
from uuid import uuid4

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.models import AuthAccount, DashboardKPI, ProjectActivity, ProjectComponent, WebsiteStat
from app.services.identity_service import IdentityService

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "Admin12345"
READER_EMAIL = "lecteur@example.com"
READER_PASSWORD = "Lecteur12345"


def create_demo_data():
    """Create demo accounts and dashboard content."""
    engine = create_engine(settings.DATABASE_URL)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = SessionLocal()

    try:
        # Check if demo data already exists
        existing = db.query(AuthAccount).filter(AuthAccount.email == ADMIN_EMAIL).first()
        if existing:
            print("Demo data already exists. Skipping seed.")
            return

        print("Creating demo accounts...")
        identity = IdentityService(db)
        for email, password, full_name, role in (
            (ADMIN_EMAIL, ADMIN_PASSWORD, "Administrateur Démo", "admin"),
            (READER_EMAIL, READER_PASSWORD, "Lecteur Démo", "user"),
        ):
            result = identity.create_account(email, password, {"full_name": full_name, "role": role})
            if not result.ok:
                raise RuntimeError(result.error.message)
            print(f"Created {role}: {email} (password: {password})")

        # Create KPIs
        kpis_data = [
            {"key": "budget_execution", "label": "Exécution budgétaire", "value": 42, "unit": "%",
             "change": "+5%", "trend": "up", "icon": "wallet", "color": "blue"},
            {"key": "activities_done", "label": "Activités terminées", "value": 18, "unit": None,
             "change": "+3", "trend": "up", "icon": "check", "color": "green"},
            {"key": "activities_blocked", "label": "Activités bloquées", "value": 2, "unit": None,
             "change": "-1", "trend": "down", "icon": "alert", "color": "red"},
            {"key": "beneficiaries", "label": "Bénéficiaires", "value": 12500, "unit": None,
             "change": None, "trend": "neutral", "icon": "users", "color": "purple"},
        ]
        for order, kpi in enumerate(kpis_data):
            db.add(DashboardKPI(id=uuid4(), order=order, is_active=True, **kpi))
        print(f"Created {len(kpis_data)} KPIs")

        # Create components and their activities
        components = {}
        for order, name in enumerate((
            "Composante 1 : Gouvernance",
            "Composante 2 : Infrastructures",
            "Composante 3 : Gestion du projet",
        )):
            component = ProjectComponent(id=uuid4(), name=name, order=order)
            db.add(component)
            components[order] = component

        activities_data = [
            (0, "Recrutement du consultant", "Cellule de coordination", "Terminé", 100, True, True, True),
            (0, "Atelier de lancement", "Cellule de coordination", "En cours", 60, True, False, False),
            (1, "Études techniques", "Bureau d'études", "Démarré", 20, True, True, False),
            (1, "Travaux de réhabilitation", None, "Bloqué", 5, True, False, False),
            (2, "Audit", None, "Non démarré", 0, False, False, False),
        ]
        for order, (component, name, responsible, status, progress, tdr, marche, contract) in enumerate(activities_data):
            db.add(ProjectActivity(
                id=uuid4(),
                component_id=components[component].id,
                activity_name=name,
                responsible=responsible,
                status=status,
                priority="normal",
                progress=progress,
                tdr_done=tdr,
                marche_done=marche,
                contract_done=contract,
                start_date=date(2026, 1, 15) if progress else None,
                budget_allocated=25_000_000 if progress else None,
                budget_spent=progress * 250_000 if progress else None,
                order=order,
            ))
        print(f"Created {len(components)} components and {len(activities_data)} activities")

        # Create website statistics
        stats_data = [
            ("Visiteurs mensuels", 8420, "user", "Visiteurs uniques sur 30 jours"),
            ("Utilisateurs actifs", 1210, "user", "Nombre d'utilisateurs actifs"),
            ("Projets publiés", 37, "project", None),
            ("Budget mobilisé", 1250000, "financial", "Montant total mobilisé"),
            ("Taux d'engagement", 64.5, "engagement", None),
        ]
        for name, value, metric_type, description in stats_data:
            db.add(WebsiteStat(
                id=uuid4(),
                metric_name=name,
                metric_value=value,
                metric_type=metric_type,
                description=description,
            ))

        db.commit()
        print(f"Created {len(stats_data)} website statistics")
        print("\n" + "=" * 50)
        print("Demo data created successfully!")
        print("=" * 50)
        print(f"\nAdmin login:  {ADMIN_EMAIL} / {ADMIN_PASSWORD}")
        print(f"Reader login: {READER_EMAIL} / {READER_PASSWORD}")
        print("=" * 50)

    except Exception as e:
        db.rollback()
        print(f"Error creating demo data: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    create_demo_data()
