# ai_learning -- online learning from user feedback
#
# Modules:
#   ledger   -- bounded interaction log, pair preferences
#   rewards  -- reward table lookup + cumulative reward
#   state    -- ModelState aggregate and its persisted document
#   engine   -- PreferenceEngine: one session, lazy load, write-through
#   export   -- preference-pairs document and DPO JSONL export
