from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from opportunities.models import Application, Category, Location, Opportunity
from profiles.models import CandidateProfile, CandidateSkill, IndustryProfile, InstituteProfile, InstituteStudent

User = get_user_model()

DEMO_PASSWORD = "password123"

CATEGORIES = ["Software Development", "Data Science", "Design", "Marketing", "Finance"]

LOCATIONS = [
    ("Bengaluru", "Karnataka"),
    ("Mumbai", "Maharashtra"),
    ("Pune", "Maharashtra"),
    ("Hyderabad", "Telangana"),
]

INDUSTRIES = [
    ("hr@techcorp.demo", "TechCorp Solutions", "Technology", False),
    ("talent@finedge.demo", "FinEdge Analytics", "Finance", True),
]

CANDIDATES = [
    ("asha@student.demo", "Asha", "Rao", [("Python", 8, 2), ("Django", 6, 1), ("SQL", 7, 2)]),
    ("vikram@student.demo", "Vikram", "Singh", [("React", 9, 3), ("TypeScript", 7, 2)]),
    ("meera@student.demo", "Meera", "Iyer", [("Figma", 5, 1)]),
]

OPPORTUNITIES = [
    (
        "hr@techcorp.demo",
        "Backend Engineering Intern",
        Opportunity.Type.INTERNSHIP,
        Opportunity.WorkType.HYBRID,
        "Software Development",
        "Bengaluru",
        15000,
        "Work with our platform team on Django services, write tests, and ship features "
        "used by thousands of customers every day.",
    ),
    (
        "hr@techcorp.demo",
        "Data Pipeline Cleanup Project",
        Opportunity.Type.PROJECT,
        Opportunity.WorkType.REMOTE,
        "Data Science",
        "Pune",
        20000,
        "A six week project to consolidate our reporting pipelines, document the data model "
        "and add monitoring for failed loads.",
    ),
    (
        "talent@finedge.demo",
        "Freelance Dashboard Designer",
        Opportunity.Type.FREELANCING,
        Opportunity.WorkType.REMOTE,
        "Design",
        "Mumbai",
        40000,
        "Design a set of analytics dashboards for our premium clients. Portfolio with "
        "data-heavy interfaces required.",
    ),
]


class Command(BaseCommand):
    help = "Populate the database with demo users, profiles and opportunities"

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS("Seeding marketplace demo data..."))

        with transaction.atomic():
            self.create_reference_data()
            self.create_industries()
            self.create_candidates()
            self.create_institute()
            self.create_opportunities()

        self.stdout.write(self.style.SUCCESS("Demo data ready!"))
        self.stdout.write(self.style.WARNING(f"\nAll demo accounts use the password '{DEMO_PASSWORD}':"))
        for email, company, _, premium in INDUSTRIES:
            self.stdout.write(f"  - {email} ({company}{', premium' if premium else ''})")
        for email, first, last, _ in CANDIDATES:
            self.stdout.write(f"  - {email} ({first} {last})")
        self.stdout.write("  - placements@college.demo (institute)")

    def _user(self, email, role, **extra):
        user, created = User.objects.get_or_create(
            email=email,
            defaults={"username": email, "role": role, **extra},
        )
        if created:
            user.set_password(DEMO_PASSWORD)
            user.save()
        return user

    def create_reference_data(self):
        for name in CATEGORIES:
            Category.objects.get_or_create(name=name)
        for city, state in LOCATIONS:
            Location.objects.get_or_create(city=city, state=state, country="India")

    def create_industries(self):
        for email, company, sector, premium in INDUSTRIES:
            user = self._user(email, User.Role.INDUSTRY, is_premium=premium)
            IndustryProfile.objects.get_or_create(
                user=user,
                defaults={"company_name": company, "industry": sector, "is_verified": True},
            )

    def create_candidates(self):
        for email, first, last, skills in CANDIDATES:
            user = self._user(email, User.Role.CANDIDATE, first_name=first, last_name=last)
            profile, _ = CandidateProfile.objects.get_or_create(
                user=user, defaults={"first_name": first, "last_name": last}
            )
            for name, level, years in skills:
                if not profile.skills.filter(name=name).exists():
                    CandidateSkill.objects.create(
                        candidate=profile, name=name, level=level, years_of_experience=years
                    )

    def create_institute(self):
        user = self._user("placements@college.demo", User.Role.INSTITUTE)
        institute, _ = InstituteProfile.objects.get_or_create(
            user=user,
            defaults={"institute_name": "City Engineering College", "institute_type": "Engineering"},
        )
        for profile in CandidateProfile.objects.filter(user__email__endswith="@student.demo"):
            InstituteStudent.objects.get_or_create(institute=institute, candidate=profile)

    def create_opportunities(self):
        for email, title, kind, work_type, category, city, stipend, description in OPPORTUNITIES:
            industry = IndustryProfile.objects.get(user__email=email)
            opportunity, created = Opportunity.objects.get_or_create(
                industry=industry,
                title=title,
                defaults={
                    "type": kind,
                    "work_type": work_type,
                    "category": Category.objects.get(name=category),
                    "location": Location.objects.filter(city=city).first(),
                    "stipend": stipend,
                    "description": description,
                    "is_active": True,
                },
            )
            if created:
                self.stdout.write(f"Created opportunity: {opportunity.title}")
            else:
                self.stdout.write(f"Opportunity already exists: {opportunity.title}")

        first = Opportunity.objects.filter(title="Backend Engineering Intern").first()
        candidate = CandidateProfile.objects.filter(user__email="asha@student.demo").first()
        if first and candidate:
            Application.objects.get_or_create(
                candidate=candidate,
                opportunity=first,
                defaults={"status": Application.Status.SHORTLISTED, "cover_letter": "Keen to learn Django at scale."},
            )
