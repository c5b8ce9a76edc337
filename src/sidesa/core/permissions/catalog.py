"""Static permission catalog and system role definitions.

Every grantable capability in the system is declared here as a
``(resource, action)`` pair with a display name. The catalog is the
source of truth for seeding the ``permissions`` table, and the gate
denies any pair that is not listed, whatever the database says.
"""

from collections import defaultdict
from dataclasses import dataclass


# Resources
USERS = "users"
CITIZENS = "citizens"
FAMILIES = "families"
LETTERS = "letters"
DOCUMENTS = "documents"
FINANCE = "finance"
CONTENT = "content"
REPORTS = "reports"
SETTINGS = "settings"
SYSTEM = "system"
GROUPS = "groups"
INVENTORY = "inventory"
COMPLAINTS = "complaints"
VILLAGE = "village"

# Actions
CREATE = "create"
READ = "read"
UPDATE = "update"
DELETE = "delete"
MANAGE = "manage"
PROCESS = "process"
APPROVE = "approve"
EXPORT = "export"
IMPORT = "import"
PUBLISH = "publish"


@dataclass(frozen=True)
class CatalogPermission:
    """A grantable (resource, action) pair.

    Attributes:
        resource: Domain object category, e.g. "citizens"
        action: Operation verb, e.g. "read"
        name: Display label
        description: Longer human-readable description
    """

    resource: str
    action: str
    name: str
    description: str = ""

    @property
    def id(self) -> str:
        """Public identifier in "resource.action" form."""
        return f"{self.resource}.{self.action}"

    @property
    def key(self) -> tuple[str, str]:
        return (self.resource, self.action)


@dataclass(frozen=True)
class SystemRole:
    """A built-in role that is seeded and cannot be edited through the API."""

    name: str
    description: str
    permission_ids: tuple[str, ...]


_P = CatalogPermission

PERMISSIONS: tuple[CatalogPermission, ...] = (
    # User management
    _P(USERS, MANAGE, "Kelola Pengguna", "Mengelola semua aspek pengguna sistem"),
    _P(USERS, READ, "Lihat Pengguna", "Melihat daftar dan detail pengguna"),
    _P(USERS, CREATE, "Tambah Pengguna", "Menambah pengguna baru"),
    _P(USERS, UPDATE, "Edit Pengguna", "Mengubah data pengguna"),
    _P(USERS, DELETE, "Hapus Pengguna", "Menghapus pengguna"),
    # Citizens
    _P(CITIZENS, MANAGE, "Kelola Penduduk", "Mengelola semua aspek data penduduk"),
    _P(CITIZENS, READ, "Lihat Penduduk", "Melihat daftar dan detail penduduk"),
    _P(CITIZENS, CREATE, "Tambah Penduduk", "Menambah data penduduk baru"),
    _P(CITIZENS, UPDATE, "Edit Penduduk", "Mengubah data penduduk"),
    _P(CITIZENS, DELETE, "Hapus Penduduk", "Menghapus data penduduk"),
    _P(CITIZENS, EXPORT, "Export Data Penduduk", "Mengexport data penduduk"),
    _P(CITIZENS, IMPORT, "Import Data Penduduk", "Mengimport data penduduk"),
    # Families
    _P(FAMILIES, MANAGE, "Kelola Keluarga", "Mengelola data keluarga"),
    _P(FAMILIES, READ, "Lihat Keluarga", "Melihat data keluarga"),
    _P(FAMILIES, CREATE, "Tambah Keluarga", "Menambah data keluarga baru"),
    _P(FAMILIES, UPDATE, "Edit Keluarga", "Mengubah data keluarga"),
    _P(FAMILIES, DELETE, "Hapus Keluarga", "Menghapus data keluarga"),
    # Letters
    _P(LETTERS, MANAGE, "Kelola Surat", "Mengelola semua aspek surat menyurat"),
    _P(LETTERS, READ, "Lihat Surat", "Melihat daftar dan detail surat"),
    _P(LETTERS, CREATE, "Buat Surat", "Membuat surat baru"),
    _P(LETTERS, PROCESS, "Proses Surat", "Memproses permohonan surat"),
    _P(LETTERS, APPROVE, "Setujui Surat", "Menyetujui surat"),
    # Documents
    _P(DOCUMENTS, MANAGE, "Kelola Dokumen", "Mengelola dokumen"),
    _P(DOCUMENTS, READ, "Lihat Dokumen", "Melihat dokumen"),
    _P(DOCUMENTS, CREATE, "Upload Dokumen", "Mengupload dokumen"),
    _P(DOCUMENTS, DELETE, "Hapus Dokumen", "Menghapus dokumen"),
    # Finance
    _P(FINANCE, MANAGE, "Kelola Keuangan", "Mengelola semua aspek keuangan"),
    _P(FINANCE, READ, "Lihat Keuangan", "Melihat data keuangan"),
    _P(FINANCE, CREATE, "Input Keuangan", "Menginput data keuangan"),
    _P(FINANCE, APPROVE, "Setujui Keuangan", "Menyetujui transaksi keuangan"),
    # Public content
    _P(CONTENT, MANAGE, "Kelola Konten", "Mengelola konten website"),
    _P(CONTENT, READ, "Lihat Konten", "Melihat konten"),
    _P(CONTENT, CREATE, "Buat Konten", "Membuat konten baru"),
    _P(CONTENT, PUBLISH, "Publikasi Konten", "Mempublikasikan konten"),
    # Reports
    _P(REPORTS, READ, "Lihat Laporan", "Melihat laporan"),
    _P(REPORTS, EXPORT, "Export Laporan", "Mengexport laporan"),
    _P(REPORTS, MANAGE, "Kelola Laporan", "Mengelola template laporan"),
    # Settings
    _P(SETTINGS, MANAGE, "Kelola Pengaturan", "Mengelola pengaturan sistem"),
    _P(SETTINGS, READ, "Lihat Pengaturan", "Melihat pengaturan"),
    # System
    _P(SYSTEM, MANAGE, "Kelola Sistem", "Mengelola sistem secara keseluruhan"),
    _P(SYSTEM, READ, "Monitor Sistem", "Memonitor status sistem"),
    # Community groups
    _P(GROUPS, MANAGE, "Kelola Kelompok", "Mengelola kelompok masyarakat"),
    _P(GROUPS, READ, "Lihat Kelompok", "Melihat data kelompok"),
    # Inventory
    _P(INVENTORY, MANAGE, "Kelola Inventaris", "Mengelola inventaris desa"),
    _P(INVENTORY, READ, "Lihat Inventaris", "Melihat data inventaris"),
    # Complaints
    _P(COMPLAINTS, MANAGE, "Kelola Pengaduan", "Mengelola pengaduan masyarakat"),
    _P(COMPLAINTS, READ, "Lihat Pengaduan", "Melihat pengaduan"),
    # Village profile
    _P(VILLAGE, MANAGE, "Kelola Data Desa", "Mengelola data dan konfigurasi desa"),
    _P(VILLAGE, READ, "Lihat Data Desa", "Melihat data desa"),
)


def _index(permissions: tuple[CatalogPermission, ...]) -> dict[str, CatalogPermission]:
    index: dict[str, CatalogPermission] = {}
    for permission in permissions:
        if permission.id in index:
            raise ValueError(f"Duplicate catalog permission: {permission.id}")
        index[permission.id] = permission
    return index


_BY_ID = _index(PERMISSIONS)
_KEYS = frozenset(p.key for p in PERMISSIONS)


# Role names
SUPER_ADMIN = "Super Admin"
ADMIN_DESA = "Admin Desa"
OPERATOR = "Operator"
VIEWER = "Viewer"

SYSTEM_ROLE_DEFINITIONS: tuple[SystemRole, ...] = (
    SystemRole(
        name=SUPER_ADMIN,
        description="Administrator sistem dengan akses penuh ke semua fitur",
        permission_ids=tuple(p.id for p in PERMISSIONS),
    ),
    SystemRole(
        name=ADMIN_DESA,
        description="Administrator desa dengan akses ke sebagian besar fitur",
        permission_ids=(
            "users.read", "users.create", "users.update",
            "citizens.manage", "citizens.read", "citizens.create", "citizens.update",
            "citizens.delete", "citizens.export", "citizens.import",
            "families.manage", "families.read", "families.create", "families.update",
            "families.delete",
            "letters.manage", "letters.read", "letters.create", "letters.process",
            "letters.approve",
            "documents.manage", "documents.read", "documents.create", "documents.delete",
            "finance.manage", "finance.read", "finance.create", "finance.approve",
            "content.manage", "content.read", "content.create", "content.publish",
            "reports.read", "reports.export", "reports.manage",
            "settings.read",
            "groups.manage", "groups.read",
            "inventory.manage", "inventory.read",
            "complaints.manage", "complaints.read",
            "village.manage", "village.read",
        ),
    ),
    SystemRole(
        name=OPERATOR,
        description="Operator data dengan akses input dan edit data",
        permission_ids=(
            "citizens.read", "citizens.create", "citizens.update", "citizens.export",
            "families.read", "families.create", "families.update",
            "letters.read", "letters.create", "letters.process",
            "documents.read", "documents.create",
            "finance.read", "finance.create",
            "content.read", "content.create",
            "reports.read", "reports.export",
            "groups.read", "inventory.read", "complaints.read", "village.read",
        ),
    ),
    SystemRole(
        name=VIEWER,
        description="Pengguna dengan akses hanya lihat",
        permission_ids=(
            "citizens.read", "families.read", "letters.read", "documents.read",
            "finance.read", "content.read", "reports.read", "groups.read",
            "inventory.read", "complaints.read", "village.read",
        ),
    ),
)

# Roles that can never be modified or deleted through the API
SYSTEM_ROLES: frozenset[str] = frozenset(r.name for r in SYSTEM_ROLE_DEFINITIONS)

for _role in SYSTEM_ROLE_DEFINITIONS:
    _unknown = [pid for pid in _role.permission_ids if pid not in _BY_ID]
    if _unknown:
        raise ValueError(f"Role {_role.name} references unknown permissions: {_unknown}")


def list_permissions() -> tuple[CatalogPermission, ...]:
    """Return every catalog permission in declaration order."""
    return PERMISSIONS


def list_resources() -> frozenset[str]:
    """Return the set of resources that have at least one permission."""
    return frozenset(p.resource for p in PERMISSIONS)


def list_actions() -> frozenset[str]:
    """Return the set of actions used by the catalog."""
    return frozenset(p.action for p in PERMISSIONS)


def get_permission(permission_id: str) -> CatalogPermission | None:
    """Look up a permission by its "resource.action" identifier."""
    return _BY_ID.get(permission_id)


def is_known(resource: str, action: str) -> bool:
    """Check whether a (resource, action) pair is part of the catalog."""
    return (resource, action) in _KEYS


def unknown_permission_ids(permission_ids: list[str]) -> list[str]:
    """Return the identifiers from ``permission_ids`` not in the catalog."""
    return [pid for pid in permission_ids if pid not in _BY_ID]


def group_by_resource() -> dict[str, list[CatalogPermission]]:
    """Group catalog permissions by resource, keeping declaration order."""
    grouped: dict[str, list[CatalogPermission]] = defaultdict(list)
    for permission in PERMISSIONS:
        grouped[permission.resource].append(permission)
    return dict(grouped)


def is_system_role(name: str) -> bool:
    """Check whether a role name belongs to a protected system role."""
    return name in SYSTEM_ROLES


def get_system_role(name: str) -> SystemRole | None:
    """Return the built-in definition a role name refers to.

    Case and surrounding whitespace are ignored, so look-alike names such
    as "super admin" resolve to the system role they imitate.
    """
    key = name.strip().casefold()
    return next(
        (r for r in SYSTEM_ROLE_DEFINITIONS if r.name.casefold() == key), None
    )
