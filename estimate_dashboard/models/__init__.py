from .estimate import Estimate, EstimateStatus, EstimateType, normalize_for_remote
