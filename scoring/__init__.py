# scoring -- feature extraction and explainable scoring
#
# Modules:
#   constants    -- named, versioned policy tables and tunables
#   features     -- entity -> canonical FeatureTuple
#   embeddings   -- hashed bag-of-words vectors + cosine similarity
#   preferences  -- per-(category, value) reinforcement store
#   scorer       -- 0..100 score with reasons and warnings
