"""
Test data factories.
Uses factory_boy so each test builds only the rows it needs.
"""
import factory
from django.contrib.auth import get_user_model
from factory.django import DjangoModelFactory

from accounts.models import Message
from opportunities.models import Application, Category, Location, Opportunity, SavedOpportunity
from profiles.models import CandidateProfile, CandidateSkill, IndustryProfile, InstituteProfile

User = get_user_model()

PASSWORD = "password123"


class UserFactory(DjangoModelFactory):
    class Meta:
        model = User
        django_get_or_create = ("email",)

    username = factory.Sequence(lambda n: f"user{n}@example.com")
    email = factory.LazyAttribute(lambda obj: obj.username)
    password = factory.django.Password(PASSWORD)
    role = User.Role.CANDIDATE
    is_active = True


class AdminUserFactory(UserFactory):
    username = factory.Sequence(lambda n: f"admin{n}@example.com")
    role = User.Role.ADMIN
    is_staff = True


class CandidateFactory(DjangoModelFactory):
    class Meta:
        model = CandidateProfile

    user = factory.SubFactory(UserFactory, role=User.Role.CANDIDATE)
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")


class CandidateSkillFactory(DjangoModelFactory):
    class Meta:
        model = CandidateSkill

    candidate = factory.SubFactory(CandidateFactory)
    name = factory.Sequence(lambda n: f"Skill {n}")
    level = 5


class IndustryFactory(DjangoModelFactory):
    class Meta:
        model = IndustryProfile

    user = factory.SubFactory(UserFactory, role=User.Role.INDUSTRY)
    company_name = factory.Sequence(lambda n: f"Acme Labs {n}")
    industry = "Technology"


class InstituteFactory(DjangoModelFactory):
    class Meta:
        model = InstituteProfile

    user = factory.SubFactory(UserFactory, role=User.Role.INSTITUTE)
    institute_name = factory.Sequence(lambda n: f"Institute of Technology {n}")
    institute_type = "Engineering"


class CategoryFactory(DjangoModelFactory):
    class Meta:
        model = Category
        django_get_or_create = ("name",)

    name = factory.Sequence(lambda n: f"Category {n}")


class LocationFactory(DjangoModelFactory):
    class Meta:
        model = Location

    city = factory.Sequence(lambda n: f"City {n}")
    state = "Karnataka"


class OpportunityFactory(DjangoModelFactory):
    class Meta:
        model = Opportunity

    industry = factory.SubFactory(IndustryFactory)
    title = factory.Sequence(lambda n: f"Backend Engineering Intern #{n}")
    description = (
        "Join the platform team to build and test web services, review code with "
        "senior engineers and ship features to production."
    )
    type = Opportunity.Type.INTERNSHIP
    work_type = Opportunity.WorkType.REMOTE
    is_active = True


class ApplicationFactory(DjangoModelFactory):
    class Meta:
        model = Application

    candidate = factory.SubFactory(CandidateFactory)
    opportunity = factory.SubFactory(OpportunityFactory)


class SavedOpportunityFactory(DjangoModelFactory):
    class Meta:
        model = SavedOpportunity

    candidate = factory.SubFactory(CandidateFactory)
    opportunity = factory.SubFactory(OpportunityFactory)


class MessageFactory(DjangoModelFactory):
    class Meta:
        model = Message

    sender = factory.SubFactory(UserFactory, role=User.Role.INDUSTRY)
    receiver = factory.SubFactory(UserFactory)
    content = factory.Faker("sentence")
