from fastapi import Depends, HTTPException, status
from mobileshop.users.auth import get_current_user
from mobileshop.users import schemas as user_schemas
from typing import List, Set


def role_required(allowed_roles: List[str]):
    allowed_set: Set[str] = set(r.strip().lower() for r in (allowed_roles or []))

    def wrapper(current_user: user_schemas.UserDisplaySchema = Depends(get_current_user)):
        # Superuser bypass
        if current_user.is_superuser:
            return current_user

        if current_user.role not in allowed_set:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden - Superuser access required"
                if allowed_set == {"superuser"}
                else "Insufficient permissions"
            )

        return current_user

    return wrapper


# Every signed-in user
require_auth = role_required(["admin"])

# Owner-only areas: expenses, dashboard, export/import, user management
require_superuser = role_required(["superuser"])
