# bids/views.py
import json
import logging

from django.contrib.auth.decorators import login_required
from django.db.models import Count, OuterRef, Q, Subquery
from django.forms.models import model_to_dict
from django.http import HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .errors import ConversationError, GenerationError, MarketplaceError
from .exports import conversation_pdf
from .forms import AISettingsForm, MarketplaceAccountForm, MessageForm, ProfileForm, ProjectForm
from .models import AISettings, MarketplaceAccount, Message, Profile, Project
from .schemas import BidSubmission, MarketplaceProject, ScreeningQuestion
from .services import conversation, generation, marketplace

logger = logging.getLogger(__name__)

# camelCase keys the dashboard sends -> model field names
PROFILE_KEYS = {"hourlyRate": "hourly_rate"}
AI_KEYS = {"apiKey": "api_key", "maxTokens": "max_tokens", "systemPrompt": "system_prompt", "baseUrl": "base_url"}
MARKETPLACE_KEYS = {"accessToken": "access_token", "defaultBidStrategy": "default_bid_strategy"}
PROJECT_KEYS = {"generatedBid": "generated_bid"}


class BadRequest(Exception):
    pass


def _json_body(request):
    try:
        data = json.loads(request.body or b"{}")
    except (ValueError, UnicodeDecodeError):
        raise BadRequest("Request body must be valid JSON.")
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object.")
    return data


def _normalize(data, aliases):
    return {aliases.get(k, k): v for k, v in data.items()}


def _form_error(form):
    errors = {field: [str(e) for e in errs] for field, errs in form.errors.items()}
    first = next(iter(errors.values()), ["Invalid data"])[0]
    return JsonResponse({"error": first, "errors": errors}, status=400)


def _error(message, status=400, **extra):
    return JsonResponse({"error": message, **extra}, status=status)


def _apply_update(instance, form_class, payload, aliases):
    """Partial update: fields missing from the payload keep their stored value."""
    payload = _normalize(payload, aliases)
    fields = form_class._meta.fields
    data = model_to_dict(instance, fields=fields)
    data.update({k: v for k, v in payload.items() if k in fields and v is not None})
    form = form_class(data=data, instance=instance)
    if not form.is_valid():
        return None, _form_error(form)
    return form.save(), None


# --- Profile & settings ---

@login_required
@require_http_methods(["GET", "POST"])
def profile(request):
    profile = Profile.for_user(request.user)
    if request.method == "POST":
        try:
            payload = _json_body(request)
        except BadRequest as e:
            return _error(str(e))
        profile, error = _apply_update(profile, ProfileForm, payload, PROFILE_KEYS)
        if error:
            return error
        return JsonResponse({"success": True, "profile": profile.as_dict()})
    return JsonResponse(profile.as_dict())


@login_required
@require_http_methods(["GET", "POST"])
def ai_settings(request):
    ai = AISettings.for_user(request.user)
    if request.method == "POST":
        try:
            payload = _json_body(request)
        except BadRequest as e:
            return _error(str(e))
        # The dashboard echoes back the masked key it was given; keep the stored one
        if payload.get("apiKey") == ai.masked_api_key:
            payload.pop("apiKey")
        ai, error = _apply_update(ai, AISettingsForm, payload, AI_KEYS)
        if error:
            return error
        return JsonResponse({"success": True, "aiSettings": ai.as_dict()})
    return JsonResponse(ai.as_dict())


@login_required
@require_http_methods(["GET", "POST"])
def marketplace_settings(request):
    account = MarketplaceAccount.for_user(request.user)
    if request.method == "POST":
        try:
            payload = _json_body(request)
        except BadRequest as e:
            return _error(str(e))
        account, error = _apply_update(account, MarketplaceAccountForm, payload, MARKETPLACE_KEYS)
        if error:
            return error
        return JsonResponse({"success": True, "marketplace": account.as_dict()})
    return JsonResponse(account.as_dict())


# --- Projects & conversation ---

@login_required
@require_http_methods(["GET", "POST"])
def projects(request):
    if request.method == "POST":
        try:
            payload = _normalize(_json_body(request), PROJECT_KEYS)
        except BadRequest as e:
            return _error(str(e))
        form = ProjectForm(data=payload)
        if not form.is_valid():
            return _form_error(form)
        project = conversation.create_project(
            request.user,
            form.cleaned_data["title"],
            proposal=form.cleaned_data["proposal"],
            generated_bid=form.cleaned_data["generated_bid"],
        )
        return JsonResponse({"success": True, "project": project.as_dict()}, status=201)

    qs = Project.objects.filter(user=request.user).prefetch_related("messages")
    return JsonResponse({"projects": [p.as_dict() for p in qs]})


@login_required
@require_http_methods(["GET", "DELETE"])
def project_detail(request, project_id):
    project = get_object_or_404(Project, id=project_id, user=request.user)
    if request.method == "DELETE":
        project.delete()
        logger.info("Deleted project %s", project_id)
        return JsonResponse({"success": True})
    return JsonResponse({"project": project.as_dict()})


@login_required
@require_http_methods(["GET", "POST"])
def project_messages(request, project_id):
    project = get_object_or_404(Project, id=project_id, user=request.user)
    if request.method == "POST":
        try:
            payload = _json_body(request)
        except BadRequest as e:
            return _error(str(e))
        form = MessageForm(data=payload)
        if not form.is_valid():
            return _error("Type and content are required", errors=form.errors.get_json_data())
        try:
            message = conversation.append_message(
                project, form.cleaned_data["type"], form.cleaned_data["content"]
            )
        except ConversationError as e:
            return _error(str(e), status=409)
        return JsonResponse({"message": message.as_dict()}, status=201)

    return JsonResponse({"messages": [m.as_dict() for m in project.messages.all()]})


@login_required
@require_GET
def download_conversation_pdf(request, project_id):
    project = get_object_or_404(Project, id=project_id, user=request.user)
    response = HttpResponse(conversation_pdf(project), content_type="application/pdf")
    response["Content-Disposition"] = f'attachment; filename="conversation_project_{project.id}.pdf"'
    return response


# --- Generation ---

def _generation_failed(e):
    logger.warning("Generation failed (%s, %s): %s", e.kind.value, e.status, e.message)
    return JsonResponse(e.as_dict(), status=e.status)


def _invalid_text(message):
    return JsonResponse(GenerationError.validation(message).as_dict(), status=400)


@login_required
@require_POST
def generate_bid(request):
    try:
        payload = _json_body(request)
    except BadRequest as e:
        return _error(str(e))

    title = payload.get("projectTitle") or payload.get("title") or ""
    proposal = payload.get("proposal") or ""
    if not isinstance(title, str) or not isinstance(proposal, str):
        return _invalid_text("Title and proposal must be text")
    title = title.strip()
    save = bool(title and payload.get("save", True))
    if save:
        form = ProjectForm(data={"title": title})
        if not form.is_valid():
            return _form_error(form)
    config = AISettings.for_user(request.user).snapshot()
    profile = Profile.for_user(request.user).snapshot()

    try:
        bid = generation.generate_bid(config, profile, title, proposal)
    except GenerationError as e:
        return _generation_failed(e)

    body = {"bid": bid}
    if save:
        project = conversation.create_project(request.user, title, proposal=proposal, generated_bid=bid)
        body["project"] = project.as_dict()
    return JsonResponse(body)


@login_required
@require_POST
def generate_answers(request):
    try:
        payload = _json_body(request)
    except BadRequest as e:
        return _error(str(e))
    if not isinstance(payload.get("project"), dict):
        return _error("Project is required")

    project = MarketplaceProject.from_dict(payload["project"])
    single = payload.get("singleQuestion") or payload.get("single_question")
    single_question = ScreeningQuestion.from_dict(single) if isinstance(single, dict) else None
    config = AISettings.for_user(request.user).snapshot()
    profile = Profile.for_user(request.user).snapshot()

    try:
        answers = generation.generate_answers(config, profile, project, single_question)
    except GenerationError as e:
        return _generation_failed(e)
    return JsonResponse({"answers": [a.to_dict() for a in answers]})


@login_required
@require_POST
def generate_reply(request):
    try:
        payload = _json_body(request)
    except BadRequest as e:
        return _error(str(e))

    try:
        project_id = int(payload.get("projectId") or payload.get("project_id"))
    except (TypeError, ValueError):
        return _error("Project is required")
    project = get_object_or_404(Project, id=project_id, user=request.user)
    client_reply = payload.get("clientReply") or payload.get("client_reply") or ""
    if not isinstance(client_reply, str):
        return _invalid_text("Client reply must be text")
    try:
        conversation.check_turn(project, Message.CLIENT)
    except ConversationError as e:
        return _error(str(e), status=409)
    config = AISettings.for_user(request.user).snapshot()
    profile = Profile.for_user(request.user).snapshot()

    try:
        reply = generation.generate_reply(
            config,
            profile,
            project.title,
            project.proposal,
            project.generated_bid,
            client_reply,
            conversation.history_for(project),
        )
    except GenerationError as e:
        return _generation_failed(e)

    try:
        client_message, my_message = conversation.record_exchange(project, client_reply, reply)
    except ConversationError as e:
        return _error(str(e), status=409, reply=reply)
    return JsonResponse({
        "reply": reply,
        "messages": [client_message.as_dict(), my_message.as_dict()],
    })


# --- Marketplace ---

def _marketplace_failed(e):
    body = {"error": e.message}
    if e.details:
        body["details"] = e.details
    return JsonResponse(body, status=e.status)


def _int_param(request, name, default):
    try:
        return int(request.GET.get(name, default))
    except (TypeError, ValueError):
        return default


@login_required
@require_http_methods(["GET", "POST"])
def marketplace_projects(request):
    account = MarketplaceAccount.for_user(request.user)
    try:
        if request.method == "POST":
            try:
                payload = _json_body(request)
            except BadRequest as e:
                return _error(str(e))
            project = marketplace.fetch_project(
                account.access_token,
                project_id=payload.get("projectId") or payload.get("project_id"),
                project_url=payload.get("projectUrl") or payload.get("project_url"),
                sandbox=account.sandbox,
            )
            return JsonResponse({"project": _with_suggestion(project, account)})

        skills = [s for s in request.GET.get("skills", "").split(",") if s]
        projects, total = marketplace.list_active_projects(
            account.access_token,
            skills=skills,
            limit=_int_param(request, "limit", 20),
            offset=_int_param(request, "offset", 0),
            sandbox=account.sandbox,
        )
    except MarketplaceError as e:
        return _marketplace_failed(e)
    return JsonResponse({"projects": [_with_suggestion(p, account) for p in projects], "total": total})


def _with_suggestion(project, account):
    data = project.to_dict()
    data["suggestedBid"] = marketplace.suggest_bid_amount(project.budget, account.default_bid_strategy)
    return data


@login_required
@require_http_methods(["GET", "POST"])
def marketplace_bids(request):
    account = MarketplaceAccount.for_user(request.user)
    try:
        if request.method == "POST":
            try:
                payload = _json_body(request)
            except BadRequest as e:
                return _error(str(e))
            bid = BidSubmission.from_dict(payload.get("bid") or payload)
            bid_id = marketplace.submit_bid(account.access_token, bid, sandbox=account.sandbox)
            return JsonResponse({"success": True, "bidId": bid_id, "message": "Bid submitted successfully"})

        bids, total = marketplace.list_bids(
            account.access_token,
            project_id=request.GET.get("project_id"),
            limit=_int_param(request, "limit", 20),
            offset=_int_param(request, "offset", 0),
            sandbox=account.sandbox,
        )
    except MarketplaceError as e:
        return _marketplace_failed(e)
    return JsonResponse({"bids": bids, "total": total})


# --- Dashboard ---

@login_required
@require_GET
def dashboard(request):
    last_turn = (
        Message.objects.filter(project=OuterRef("pk"), type__in=Message.TURN_TYPES)
        .order_by("-created_at", "-id")
        .values("type")[:1]
    )
    projects = Project.objects.filter(user=request.user).annotate(
        bid_count=Count("messages", filter=Q(messages__type=Message.BID)),
        last_turn=Subquery(last_turn),
    ).order_by("-created_at", "-id")
    messages = Message.objects.filter(project__user=request.user)

    stats = {
        "totalProjects": projects.count(),
        "projectsWithBid": projects.filter(bid_count__gt=0).count(),
        "awaitingReply": projects.filter(last_turn=Message.CLIENT).count(),
        "repliesSent": messages.filter(type=Message.ME).count(),
        "totalMessages": messages.count(),
    }
    recent = [p.as_dict(with_messages=False) for p in projects[:5]]
    return JsonResponse({"stats": stats, "recentProjects": recent})
