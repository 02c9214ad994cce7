"""
Organisation scoping helpers.

Every tenant-owned model carries an ``org`` foreign key. Views never query
those models directly; they go through these helpers so a user only ever
sees rows that belong to their own organisation.
"""
from django.http import Http404
from rest_framework.exceptions import PermissionDenied


def get_request_org(request):
    """Return the organisation of the authenticated user or raise 403"""
    user = getattr(request, 'user', None)
    org = getattr(user, 'org', None) if user is not None else None
    if org is None:
        raise PermissionDenied('User is not a member of an organisation.')
    return org


def org_queryset(model, request):
    """All rows of ``model`` visible to the requesting user's organisation"""
    return model.objects.filter(org=get_request_org(request))


def get_org_object_or_404(model, request, pk, queryset=None):
    """Fetch a tenant row by primary key; rows of other organisations are a 404"""
    if queryset is None:
        queryset = org_queryset(model, request)
    try:
        return queryset.get(pk=pk)
    except model.DoesNotExist:
        raise Http404(f'No {model._meta.object_name} matches the given query.')
