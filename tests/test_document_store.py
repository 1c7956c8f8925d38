from quality_agent.llm.document_store import DocumentStore


def test_query_returns_most_similar_chunk_first():
    store = DocumentStore(chunk_size=50, overlap=0)
    text = " ".join(["checkout payment card refund"] * 15) + " " + " ".join(["profile avatar upload"] * 20)

    added = store.add_document("PROJ-index", text)
    results = store.query("PROJ-index", "avatar upload limits", top_k=1)

    assert added > 1
    assert "avatar" in results[0]


def test_unknown_index_and_empty_document():
    store = DocumentStore()

    assert store.query("missing", "anything") == []
    assert store.add_document("PROJ-index", "   ") == 0


def test_chunks_overlap():
    store = DocumentStore(chunk_size=50, overlap=10)
    words = [f"w{i}" for i in range(90)]

    chunks = store.chunk(" ".join(words))

    assert len(chunks) == 2
    assert chunks[0].split()[-10:] == chunks[1].split()[:10]
