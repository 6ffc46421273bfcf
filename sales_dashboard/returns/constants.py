"""
Constants for returns operations.
"""

# History log wording (kept in Czech, as shown to the shop staff)
ADDED_TO_RETURNS_ACTION = "Přidáno do vrácení"
ADDED_TO_RETURNS_DETAILS = "Položka '{item_name}' přidána do Vrácení starých motorů."

# Notifications returned to the client after "add to returns"
ADDED_TO_RETURNS_MESSAGE = "Přidáno do sekce Vrácení"
ADD_TO_RETURNS_FAILED_MESSAGE = "Chyba při přidávání do vrácení"

# Badge labels for the returned toggle
RETURN_STATUS_LABELS = {
    True: "Vráceno",
    False: "Nesplněno",
}
