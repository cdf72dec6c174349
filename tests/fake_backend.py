"""
In-memory stand-in for the vault's REST backend (FastAPI, mounted under /api).

Every request is recorded on the FakeVault so tests can assert on what the
client actually sent. Failures can be injected per (method, path).
"""

import itertools
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, FastAPI, File, Form, Header, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException


@dataclass
class RecordedRequest:
    method: str
    path: str
    authorization: Optional[str]
    content_type: Optional[str]
    query: str = ""


@dataclass
class FakeVault:
    valid_tokens: set = field(default_factory=lambda: {"token-1"})
    documents: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    shared: List[Dict[str, Any]] = field(default_factory=list)
    groups: List[Dict[str, Any]] = field(default_factory=list)
    received: List[Dict[str, Any]] = field(default_factory=list)
    users: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    sync_calls: int = 0
    profile: Dict[str, Any] = field(default_factory=lambda: {"name": "Alice", "email": "alice@example.com"})
    extended: Dict[str, Any] = field(default_factory=dict)
    shares: List[Dict[str, Any]] = field(default_factory=list)
    requests: List[RecordedRequest] = field(default_factory=list)
    failures: Dict[Tuple[str, str], Tuple[int, str]] = field(default_factory=dict)
    _ids: Any = field(default_factory=lambda: itertools.count(1))

    def next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids)}"

    def fail(self, method: str, path: str, status: int = 500, message: str = "Server error"):
        self.failures[(method, path)] = (status, message)

    def government_ids(self) -> Dict[str, Any]:
        return self.extended.setdefault("governmentIds", {"aadhaar": {"status": "not_linked"}, "pan": {}})

    def add_document(self, title: str, category: str = "other", mime_type: str = "application/pdf",
                     content: bytes = b"%PDF-1.4 fake", doc_id: Optional[str] = None) -> str:
        doc_id = doc_id or self.next_id("D")
        self.documents[doc_id] = {
            "_id": doc_id,
            "title": title,
            "category": category,
            "mimeType": mime_type,
            "fileSize": len(content),
            "uploadDate": datetime(2024, 1, 15).isoformat(),
            "originalName": f"{title}.bin",
            "content": content,
        }
        return doc_id

    def add_group(self, name: str = "My Family", members: Optional[List[Dict[str, Any]]] = None,
                  invitations: Optional[List[Dict[str, Any]]] = None) -> str:
        group_id = self.next_id("G")
        self.groups.append({
            "_id": group_id,
            "name": name,
            "createdBy": "uid-alice",
            "members": members if members is not None else [
                {"userId": "uid-alice", "email": "alice@example.com", "displayName": "Alice", "role": "owner"},
            ],
            "invitations": invitations or [],
        })
        return group_id

    def paths(self, method: Optional[str] = None) -> List[str]:
        return [r.path for r in self.requests if method is None or r.method == method]


def _public(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in doc.items() if k != "content"}


def add_exception_handlers(app: FastAPI):
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"success": False, "message": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=422, content={"success": False, "message": "Input validation failed"})


def create_app(vault: FakeVault) -> FastAPI:
    app = FastAPI()
    add_exception_handlers(app)

    @app.middleware("http")
    async def record_requests(request: Request, call_next):
        path = request.url.path
        vault.requests.append(RecordedRequest(
            method=request.method,
            path=path,
            authorization=request.headers.get("authorization"),
            content_type=request.headers.get("content-type"),
            query=request.url.query,
        ))
        failure = vault.failures.get((request.method, path))
        if failure:
            status, message = failure
            return JSONResponse(status_code=status, content={"success": False, "message": message})
        return await call_next(request)

    def require_auth(authorization: Optional[str] = Header(default=None)) -> str:
        if not authorization or not authorization.startswith("Bearer "):
            raise StarletteHTTPException(status_code=401, detail="No token provided")
        token = authorization[len("Bearer "):]
        if token not in vault.valid_tokens:
            raise StarletteHTTPException(status_code=401, detail="Invalid token")
        return token

    api = APIRouter(prefix="/api", dependencies=[Depends(require_auth)])

    # ------------------------------------------------------------ users
    @api.post("/users/sync")
    async def sync_user(body: Dict[str, Any]):
        vault.sync_calls += 1
        vault.users[body["firebaseUID"]] = body
        return {"success": True}

    @api.get("/users/profile")
    async def get_profile():
        return {"success": True, "profile": vault.profile}

    @api.put("/users/profile")
    async def update_profile(body: Dict[str, Any]):
        vault.profile.update(body)
        return {"success": True}

    # -------------------------------------------------------- documents
    @api.get("/documents")
    async def list_documents(limit: int = 50):
        return {"success": True, "documents": [_public(d) for d in list(vault.documents.values())[:limit]]}

    @api.get("/documents/stats")
    async def stats():
        members = sum(len(g["members"]) for g in vault.groups)
        return {
            "success": True,
            "stats": {
                "totalDocuments": len(vault.documents),
                "sharedDocuments": len(vault.shared),
                "recentUploads": len(vault.documents),
                "storageUsed": sum(d["fileSize"] for d in vault.documents.values()),
                "familyMembers": members,
            },
        }

    @api.get("/documents/shared")
    async def shared():
        return {"success": True, "documents": vault.shared}

    @api.post("/documents/upload")
    async def upload(
        document: UploadFile = File(...),
        title: str = Form(...),
        category: str = Form("other"),
        type: Optional[str] = Form(None),
        description: Optional[str] = Form(None),
    ):
        content = await document.read()
        doc_id = vault.add_document(title, category or type or "other", document.content_type, content)
        vault.documents[doc_id]["description"] = description
        return {"success": True, "documentId": doc_id, "message": "Document uploaded successfully"}

    @api.get("/documents/{document_id}/download")
    async def download(document_id: str):
        doc = vault.documents.get(document_id)
        if doc is None:
            raise StarletteHTTPException(status_code=404, detail="Document not found")
        return Response(
            content=doc["content"],
            media_type=doc["mimeType"],
            headers={"Content-Disposition": f'attachment; filename="{doc["originalName"]}"'},
        )

    @api.delete("/documents/{document_id}")
    async def delete(document_id: str):
        if vault.documents.pop(document_id, None) is None:
            raise StarletteHTTPException(status_code=404, detail="Document not found")
        return {"success": True}

    @api.post("/documents/{document_id}/share")
    async def share(document_id: str, body: Dict[str, Any]):
        vault.shares.append({"document_id": document_id, **body})
        return {"success": True}

    # ----------------------------------------------------------- family
    @api.get("/family/my-groups")
    async def my_groups():
        return {"success": True, "familyGroups": vault.groups}

    @api.post("/family/create")
    async def create_group(body: Dict[str, Any]):
        group_id = vault.add_group(body["name"])
        return {"success": True, "familyGroup": vault.groups[-1], "message": f"Created {group_id}"}

    @api.post("/family/{group_id}/invite")
    async def invite(group_id: str, body: Dict[str, Any]):
        group = next((g for g in vault.groups if g["_id"] == group_id), None)
        if group is None:
            raise StarletteHTTPException(status_code=404, detail="Family group not found")
        group["invitations"].append({
            "_id": vault.next_id("I"),
            "email": body["email"],
            "role": body["role"],
            "status": "pending",
            "token": vault.next_id("tok-"),
        })
        return {"success": True}

    @api.get("/family/invitations/pending")
    async def pending():
        return {"success": True, "invitations": [i for i in vault.received if i.get("status", "pending") == "pending"]}

    @api.post("/family/accept-invitation/{token}")
    async def accept(token: str):
        inv = next((i for i in vault.received if i.get("invitationToken") == token), None)
        if inv is None:
            raise StarletteHTTPException(status_code=404, detail="Invalid or expired invitation")
        inv["status"] = "accepted"
        return {"success": True}

    @api.post("/family/reject-invitation/{token}")
    async def reject(token: str):
        inv = next((i for i in vault.received if i.get("invitationToken") == token), None)
        if inv is None:
            raise StarletteHTTPException(status_code=404, detail="Invalid or expired invitation")
        inv["status"] = "rejected"
        return {"success": True}

    @api.delete("/family/{group_id}/members/{member_id}")
    async def remove_member(group_id: str, member_id: str):
        for group in vault.groups:
            if group["_id"] == group_id:
                group["members"] = [m for m in group["members"] if m.get("userId") != member_id]
                return {"success": True}
        raise StarletteHTTPException(status_code=404, detail="Family group not found")

    @api.post("/family/invitations/{invitation_id}/resend")
    async def resend(invitation_id: str):
        return {"success": True}

    @api.delete("/family/invitations/{invitation_id}")
    async def cancel(invitation_id: str):
        for group in vault.groups:
            for inv in group["invitations"]:
                if inv["_id"] == invitation_id:
                    inv["status"] = "cancelled"
        return {"success": True}

    # ---------------------------------------------------------- profile
    @api.get("/profile")
    async def extended_profile():
        return {"success": True, "profile": vault.extended}

    @api.post("/profile")
    async def update_extended(body: Dict[str, Any]):
        vault.extended.update(body)
        return {"success": True}

    @api.get("/profile/completion")
    async def completion():
        return {"success": True, "completion": {
            "percentage": 40,
            "level": "intermediate",
            "badges": [{"type": "email"}],
            "suggestions": ["Add your PAN details"],
        }}

    @api.get("/profile/activity")
    async def activity(limit: int = 10):
        return {"success": True, "activities": [{"action": "login", "description": "Signed in"}][:limit]}

    @api.post("/profile/picture")
    async def picture(profilePicture: UploadFile = File(...)):
        vault.extended["profilePicture"] = profilePicture.filename
        return {"success": True}

    @api.post("/profile/aadhaar/link")
    async def link_aadhaar(body: Dict[str, Any]):
        number = body["aadhaarNumber"]
        masked = f"XXXX-XXXX-{number[-4:]}"
        vault.government_ids()["aadhaar"] = {"maskedAadhaar": masked, "status": "pending"}
        return {"success": True, "verificationId": "V1", "maskedAadhaar": masked}

    @api.post("/profile/aadhaar/verify")
    async def verify_aadhaar(body: Dict[str, Any]):
        if body.get("verificationId") != "V1":
            raise StarletteHTTPException(status_code=400, detail="Invalid verification")
        vault.government_ids()["aadhaar"]["status"] = "verified"
        return {"success": True}

    @api.post("/profile/pan")
    async def add_pan(body: Dict[str, Any]):
        vault.government_ids()["pan"] = {"number": body["number"], "isVerified": False}
        return {"success": True}

    @api.post("/profile/address")
    async def save_address(body: Dict[str, Any]):
        vault.extended.setdefault("addresses", {})[body["type"]] = body
        return {"success": True}

    @api.delete("/profile/address/{address_type}")
    async def delete_address(address_type: str):
        vault.extended.get("addresses", {}).pop(address_type, None)
        return {"success": True}

    @api.post("/profile/security/settings")
    async def security_settings(body: Dict[str, Any]):
        vault.extended["security"] = body
        return {"success": True}

    @api.post("/profile/security/questions")
    async def security_questions(body: Dict[str, Any]):
        vault.extended["securityQuestions"] = body["questions"]
        return {"success": True}

    app.include_router(api)
    return app
