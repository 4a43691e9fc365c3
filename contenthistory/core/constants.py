"""Constantes partagées (action ACL, champs de l'empreinte, tri, messages)."""

# Action ACL vérifiée sur l'élément vivant (jamais sur la ligne d'historique)
EDIT_ACTION = "core.edit"

# Champs ignorés par l'empreinte lorsque le type ne déclare pas `ignoreChanges`
DEFAULT_IGNORE_CHANGES = (
    "modified_by",
    "modified",
    "checked_out",
    "checked_out_time",
    "version",
    "hits",
    "path",
)

# Colonnes texte contenant un objet JSON, aplaties lorsque le type ne déclare pas `jsonColumns`
DEFAULT_JSON_COLUMNS = ("attribs", "metadata", "params", "images", "urls")

# Colonnes autorisées pour le tri de la liste des versions
ORDERABLE_COLUMNS = ("version_id", "version_note", "save_date", "editor_user_id")
ORDER_DIRECTIONS = ("ASC", "DESC")

DELETE_NOT_PERMITTED = "Delete not permitted."
KEEP_NOT_PERMITTED = "Keep forever not permitted."
NOT_AUTHORISED = "You are not authorised to view this resource."
