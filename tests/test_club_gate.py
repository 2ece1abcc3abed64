"""
Club authorization gate tests
"""
import pytest

from athletics import models
from athletics.club_gate import (
    SessionContext,
    authorize_club,
    authorize_global,
    authorize_row,
    list_user_clubs,
    validate_club_selection,
)
from athletics.errors import (
    AccessDenied,
    ClubContextRequired,
    ClubMismatch,
    InsufficientPermissions,
    NotFound,
    Unauthenticated,
)
from athletics.roles import ClubRole, MANAGE_ROLE, READ_ROLE

from conftest import add_membership, make_club


@pytest.fixture
def user(session):
    u = models.User(email="coach@example.com", name="Coach", password_hash="x")
    session.add(u)
    session.commit()
    return u


class TestRoles:
    """Role ordering"""

    def test_ranks(self):
        assert ClubRole.OWNER.meets(ClubRole.ADMIN)
        assert ClubRole.ADMIN.meets(MANAGE_ROLE)
        assert not ClubRole.COACH.meets(MANAGE_ROLE)
        assert ClubRole.MEMBER.meets(READ_ROLE)


class TestAuthorizeClub:
    """The state machine, step by step"""

    def test_no_user(self, session, club):
        """Step 1"""
        with pytest.raises(Unauthenticated):
            authorize_club(session, SessionContext(), club_id=club.id)

    def test_no_club(self, session, user):
        """Step 2"""
        with pytest.raises(ClubContextRequired):
            authorize_club(session, SessionContext(user_id=user.id))

    def test_mismatch(self, session, user, club):
        """Step 3"""
        other = make_club(session, "Other AC")
        add_membership(session, user.id, club.id)
        add_membership(session, user.id, other.id)
        ctx = SessionContext(user_id=user.id, selected_club_id=club.id)
        with pytest.raises(ClubMismatch):
            authorize_club(session, ctx, required_club_id=other.id)

    def test_required_without_selection(self, session, user, club):
        """A required club needs a selected one to compare with"""
        with pytest.raises(ClubContextRequired):
            authorize_club(session, SessionContext(user_id=user.id), required_club_id=club.id)

    def test_no_membership(self, session, user, club):
        """Step 4: no row"""
        with pytest.raises(AccessDenied):
            authorize_club(session, SessionContext(user_id=user.id, selected_club_id=club.id))

    def test_inactive_membership(self, session, user, club):
        """Step 4: an inactive row still denies"""
        add_membership(session, user.id, club.id, "OWNER", is_active=False)
        with pytest.raises(AccessDenied):
            authorize_club(session, SessionContext(user_id=user.id), club_id=club.id)

    def test_deactivated_club(self, session, user):
        """Step 4: a deactivated club denies"""
        closed = make_club(session, "Closed AC", is_active=False)
        add_membership(session, user.id, closed.id, "OWNER")
        with pytest.raises(AccessDenied):
            authorize_club(session, SessionContext(user_id=user.id), club_id=closed.id)

    def test_insufficient_role(self, session, user, club):
        """Step 5"""
        add_membership(session, user.id, club.id, "COACH")
        with pytest.raises(InsufficientPermissions):
            authorize_club(session, SessionContext(user_id=user.id, selected_club_id=club.id), minimum_role=MANAGE_ROLE)

    def test_success(self, session, user, club):
        """Step 6: explicit club wins over the selected one"""
        other = make_club(session, "Other AC")
        add_membership(session, user.id, club.id, "ADMIN")
        ctx = SessionContext(user_id=user.id, selected_club_id=other.id)
        result = authorize_club(session, ctx, club_id=club.id, minimum_role=MANAGE_ROLE)
        assert result.club_id == club.id
        assert result.user_id == user.id
        assert result.role is ClubRole.ADMIN


class TestGlobalAndSelection:
    """Global resources and club selection"""

    def test_global_needs_admin_somewhere(self, session, user, club):
        add_membership(session, user.id, club.id, "MEMBER")
        with pytest.raises(InsufficientPermissions):
            authorize_global(session, SessionContext(user_id=user.id), MANAGE_ROLE)
        other = make_club(session, "Other AC")
        add_membership(session, user.id, other.id, "OWNER")
        assert authorize_global(session, SessionContext(user_id=user.id), MANAGE_ROLE) == user.id

    def test_selection_validates_only(self, session, user, club):
        add_membership(session, user.id, club.id, "MEMBER")
        ctx = SessionContext(user_id=user.id)
        result = validate_club_selection(session, ctx, club.id)
        assert result.role is ClubRole.MEMBER
        assert ctx.selected_club_id is None

    def test_selection_denied(self, session, user, club):
        with pytest.raises(AccessDenied) as exc:
            validate_club_selection(session, SessionContext(user_id=user.id), club.id)
        assert exc.value.message == "Access denied to the specified club"

    def test_list_user_clubs(self, session, user, club):
        add_membership(session, user.id, club.id, "MEMBER")
        closed = make_club(session, "Closed AC", is_active=False)
        add_membership(session, user.id, closed.id, "OWNER")
        assert [m.club_id for m in list_user_clubs(session, user.id)] == [club.id]


class TestAuthorizeRow:
    """Rows addressed by id"""

    def test_missing_row(self, session, user, club):
        add_membership(session, user.id, club.id, "OWNER")
        ctx = SessionContext(user_id=user.id, selected_club_id=club.id)
        with pytest.raises(NotFound) as missing:
            authorize_row(session, ctx, None, not_found=NotFound("Athlete not found"))
        assert missing.value.message == "Athlete not found"

    def test_foreign_row_reads_as_missing(self, session, user, club):
        other = make_club(session, "Other AC")
        add_membership(session, user.id, club.id, "OWNER")
        ctx = SessionContext(user_id=user.id, selected_club_id=club.id)
        with pytest.raises(NotFound):
            authorize_row(session, ctx, other.id)

    def test_role_still_checked(self, session, user, club):
        add_membership(session, user.id, club.id, "MEMBER")
        ctx = SessionContext(user_id=user.id)
        with pytest.raises(InsufficientPermissions):
            authorize_row(session, ctx, club.id, MANAGE_ROLE)
        assert authorize_row(session, ctx, club.id, READ_ROLE).club_id == club.id

    def test_no_user(self, session, club):
        with pytest.raises(Unauthenticated):
            authorize_row(session, SessionContext(), club.id)
