"""Search service configuration."""

from oti.shared.config import BaseServiceSettings


class SearchSettings(BaseServiceSettings):
    """Settings specific to the search server and its Neo4j adapters."""

    service_name: str = "search"
    host: str = "0.0.0.0"
    port: int = 8010

    # Fulltext index names, one per entity class and mode
    study_meta_index_exact: str = "study_meta_nodes_by_property_exact"
    study_meta_index_fulltext: str = "study_meta_nodes_by_property_fulltext"
    tree_root_index_exact: str = "tree_root_nodes_by_property_exact"
    tree_root_index_fulltext: str = "tree_root_nodes_by_property_fulltext"
    tree_node_index_exact: str = "tree_nodes_by_property_exact"
    tree_node_index_fulltext: str = "tree_nodes_by_property_fulltext"

    # Graph model
    study_meta_label: str = "StudyMeta"
    tree_root_label: str = "TreeRoot"
    tree_node_label: str = "TreeNode"
    tree_edge_type: str = "CHILDOF"

    # Reject property names outside the searchable vocabulary
    strict_properties: bool = True

    class Config(BaseServiceSettings.Config):
        env_prefix = "OTI_SEARCH_"
