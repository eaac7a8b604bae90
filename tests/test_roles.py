import pytest
from django.contrib.auth.models import AnonymousUser

from apps.accounts.models import User
from apps.accounts.roles import has_role, is_admin, role_of, sender_label


@pytest.mark.django_db
def test_sender_label_per_role(make_user, admin_user, client_user, gruzchik):
    supplier = make_user(User.ROLE_PROVIDER, name="Поставщик")
    assert sender_label(admin_user) == "admin"
    assert sender_label(gruzchik) == "gruzchik"
    assert sender_label(supplier) == "provider"
    assert sender_label(client_user) == "client"


@pytest.mark.django_db
def test_provider_role_passes_no_portal_check(make_user):
    supplier = make_user(User.ROLE_PROVIDER)
    assert role_of(supplier) == User.ROLE_PROVIDER
    assert not has_role(supplier, User.ROLE_CLIENT, User.ROLE_GRUZCHIK, User.ROLE_ADMIN)
    assert not is_admin(supplier)


@pytest.mark.django_db
def test_admin_passes_every_role_check(admin_user):
    assert has_role(admin_user, User.ROLE_CLIENT)
    assert has_role(admin_user, User.ROLE_GRUZCHIK)


def test_anonymous_has_no_role():
    anon = AnonymousUser()
    assert role_of(anon) == ""
    assert not is_admin(anon)
    assert not has_role(anon, User.ROLE_CLIENT)


@pytest.mark.django_db
def test_provider_is_refused_by_client_portal(api_client, make_user):
    supplier = make_user(User.ROLE_PROVIDER)
    assert api_client(supplier).get("/api/v1/orders/").status_code == 403
