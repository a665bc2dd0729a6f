from typing import List

from fastapi import APIRouter

from app.schemas import Role

router = APIRouter()

# Roles offered by the role picker. Clients may send either the id or the name.
ROLES: List[Role] = [
    Role(id="frontend", name="Frontend Developer"),
    Role(id="backend", name="Backend Developer"),
    Role(id="fullstack", name="Full Stack Developer"),
    Role(id="data-scientist", name="Data Scientist"),
    Role(id="ml-engineer", name="ML Engineer"),
    Role(id="devops", name="DevOps Engineer"),
    Role(id="mobile", name="Mobile Developer"),
    Role(id="ui-ux", name="UI/UX Designer"),
    Role(id="product-manager", name="Product Manager"),
    Role(id="qa", name="QA Engineer"),
    Role(id="cloud", name="Cloud Architect"),
    Role(id="security", name="Security Engineer"),
]

_ROLE_NAMES = {role.id: role.name for role in ROLES}

def resolve_role_name(target_role: str) -> str:
    """Catalog ids become display names; free-text roles are kept as sent."""
    return _ROLE_NAMES.get(target_role, target_role)

@router.get("/roles", response_model=List[Role])
def get_roles():
    """
    Fetches list of available roles for the dropdown.
    POST /analyze-resume accepts either field; an id is expanded to its name before prompting.
    """
    return ROLES
