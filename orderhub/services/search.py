"""
Fuzzy product search.

Scoring of one product against a query:

- name equal to the whole query: 200, nothing else is counted
- whole query inside the name: +150
- per token, best of substring (100), edit distance similarity (>= 70),
  ordered character sequence (80) and word prefix (85), plus a 50 bonus
- per token, category substring +40, else category similarity >= 70 gives
  20 + (similarity - 70)
- per token, description substring +10

Candidates come from a substring prefilter; when nothing scores there the
whole catalog is scored so typo heavy queries still find something.
"""
import re

from mongoengine import Q

import const
from orderhub.errors.exceptions import ValidationError
from orderhub.lib.logger import logger
from orderhub.models.product import Product

EXACT_MATCH_SCORE = 200
PHRASE_MATCH_SCORE = 150
SUBSTRING_SCORE = 100
FUZZY_SEQUENCE_SCORE = 80
PARTIAL_WORD_SCORE = 85
NAME_MATCH_BONUS = 50
CATEGORY_MATCH_SCORE = 40
CATEGORY_FUZZY_BASE = 20
DESCRIPTION_MATCH_SCORE = 10
SIMILARITY_THRESHOLD = 70
SUGGESTION_SIMILARITY_THRESHOLD = 60


def levenshtein_distance(first, second):
    if len(first) < len(second):
        first, second = second, first
    previous = list(range(len(second) + 1))
    for i, left in enumerate(first, 1):
        current = [i]
        for j, right in enumerate(second, 1):
            if left == right:
                current.append(previous[j - 1])
            else:
                current.append(1 + min(previous[j], current[j - 1], previous[j - 1]))
        previous = current
    return previous[-1]


def calculate_similarity(first, second):
    max_len = max(len(first), len(second))
    if max_len == 0:
        return 100
    distance = levenshtein_distance(first, second)
    # round half up, 0-100
    return int((max_len - distance) * 100 / max_len + 0.5)


def sanitize_query(query):
    if not query:
        return ""
    cleaned = re.sub(r"[^a-z0-9\s-]", "", str(query).lower().strip())
    return re.sub(r"\s+", " ", cleaned).strip()


def tokenize_query(query):
    return [token for token in query.split(" ") if token]


def is_fuzzy_sequence(token, text):
    pattern = ".*".join(re.escape(char) for char in token)
    return re.search(pattern, text) is not None


def match_product_name(name, tokens):
    """Best name strategy over ``tokens`` as ``(matched, score, match_type)``."""
    name_l = (name or "").lower()
    best = 0
    match_type = "none"

    for token in tokens:
        token_l = token.lower()
        if token_l in name_l:
            return True, SUBSTRING_SCORE, "exact_substring"

        similarity = calculate_similarity(token_l, name_l)
        if similarity >= SIMILARITY_THRESHOLD and similarity > best:
            best, match_type = similarity, "levenshtein"

        if is_fuzzy_sequence(token_l, name_l) and FUZZY_SEQUENCE_SCORE > best:
            best, match_type = FUZZY_SEQUENCE_SCORE, "fuzzy_sequence"

        if any(word.startswith(token_l) for word in name_l.split(" ")):
            if PARTIAL_WORD_SCORE > best:
                best, match_type = PARTIAL_WORD_SCORE, "partial_word"

    return best >= SIMILARITY_THRESHOLD, best, match_type


def score_product(product, tokens, full_query=""):
    name_l = (product.name or "").lower()
    category_l = (product.category or "").lower()
    description_l = (product.description or "").lower()
    full_query_l = (full_query or "").lower()

    score = 0
    if name_l == full_query_l:
        return EXACT_MATCH_SCORE
    if full_query_l and full_query_l in name_l:
        score += PHRASE_MATCH_SCORE

    for token in tokens:
        token_l = token.lower()

        matched, name_score, _ = match_product_name(product.name, [token])
        if matched:
            score += name_score + NAME_MATCH_BONUS

        if token_l in category_l:
            score += CATEGORY_MATCH_SCORE
        else:
            similarity = calculate_similarity(token_l, category_l)
            if similarity >= SIMILARITY_THRESHOLD:
                score += CATEGORY_FUZZY_BASE + (similarity - SIMILARITY_THRESHOLD)

        if description_l and token_l in description_l:
            score += DESCRIPTION_MATCH_SCORE

    return max(score, 0)


def rank_products(candidates, tokens, full_query=""):
    """Score, drop zero scores and sort descending; ties keep input order.

    Exact name matches always come first even when a longer name piles up
    a higher score from phrase and token matches.
    """
    full_query_l = (full_query or "").lower()
    scored = [(product, score_product(product, tokens, full_query)) for product in candidates]
    scored = [item for item in scored if item[1] > 0]
    scored.sort(
        key=lambda item: ((item[0].name or "").lower() == full_query_l, item[1]),
        reverse=True,
    )
    return scored


def slugify(name):
    slug = re.sub(r"[^a-z0-9]+", "-", (name or "").lower()).strip("-")
    return slug or "product"


def transform_product(product):
    image = None
    if product.images:
        image = product.images[0].get("url")
    return {
        "id": str(product.pk),
        "name": product.name,
        "category": product.category or "Uncategorized",
        "price": product.price,
        "image": image,
        "averageRating": product.average_rating or 0,
        "slug": slugify(product.name),
    }


def clamp(value, default, low, high):
    try:
        value = int(value)
    except (TypeError, ValueError):
        value = default
    return min(max(value, low), high)


def pagination(total, limit, skip):
    return {
        "total": total,
        "page": skip // limit + 1,
        "hasMore": skip + limit < total,
        "pagination": {
            "limit": limit,
            "skip": skip,
            "totalPages": (total + limit - 1) // limit,
        },
    }


class SearchService:

    @staticmethod
    def token_filter(tokens):
        condition = Q()
        for token in tokens:
            condition |= (
                Q(name__icontains=token)
                | Q(category__icontains=token)
                | Q(description__icontains=token)
            )
        return condition

    @staticmethod
    def candidates(tokens):
        if not tokens:
            return []
        return list(Product.objects(SearchService.token_filter(tokens)))

    @staticmethod
    def distinct_categories():
        return [category for category in Product.objects.distinct("category") if category]

    @staticmethod
    def related_keywords(products, max_suggestions=const.SEARCH_MAX_SUGGESTIONS):
        keywords = []

        def add(keyword):
            if keyword and keyword not in keywords:
                keywords.append(keyword)

        if not products:
            for category in SearchService.distinct_categories():
                add(category)
            return keywords[:max_suggestions]

        categories = []
        for product in products:
            if product.category and product.category not in categories:
                categories.append(product.category)
                add(product.category)

        if categories:
            related = Product.objects(
                category__in=categories, id__nin=[product.pk for product in products]
            ).limit(const.SEARCH_RELATED_SAMPLE)
            for product in related:
                add(product.name)

        return keywords[:max_suggestions]

    @staticmethod
    def search(query, limit=None, skip=None):
        if not query or not str(query).strip():
            raise ValidationError("Search query is required")
        limit = clamp(limit, const.SEARCH_DEFAULT_LIMIT, 1, const.SEARCH_MAX_LIMIT)
        skip = clamp(skip, 0, 0, 10 ** 9)

        clean_query = sanitize_query(query)
        tokens = tokenize_query(clean_query)
        if not tokens:
            raise ValidationError("Invalid search query")

        scored = rank_products(SearchService.candidates(tokens), tokens, clean_query)
        if not scored:
            logger.info(f"No prefiltered matches for {clean_query!r}, scoring whole catalog")
            scored = rank_products(Product.objects(), tokens, clean_query)

        if scored:
            result_type = "exact"
            message = f'Found {len(scored)} results for "{clean_query}"'
            related = SearchService.related_keywords(
                [product for product, _ in scored[: const.SEARCH_RELATED_TOP]]
            )
        else:
            result_type = "empty"
            message = f'No products found for "{clean_query}". Try different keywords.'
            related = SearchService.distinct_categories()[: const.SEARCH_MAX_SUGGESTIONS]

        results = [transform_product(product) for product, _ in scored]
        response = {
            "query": clean_query,
            "type": result_type,
            "message": message,
            "results": results[skip : skip + limit],
            "relatedKeywords": related,
        }
        response.update(pagination(len(results), limit, skip))
        return response

    @staticmethod
    def suggestions(partial_query):
        partial = (partial_query or "").lower()
        if not partial:
            return []

        found = {}
        names = Product.objects(name__icontains=partial).only("name").limit(
            const.AUTOCOMPLETE_QUERY_LIMIT
        )
        for product in names:
            found.setdefault(product.name.lower(), {"text": product.name, "type": "product"})
        categories = Product.objects(category__icontains=partial).only("category").limit(
            const.AUTOCOMPLETE_QUERY_LIMIT
        )
        for product in categories:
            found.setdefault(
                product.category.lower(), {"text": product.category, "type": "category"}
            )

        if len(found) < const.AUTOCOMPLETE_LIMIT:
            for product in Product.objects().only("name", "category"):
                for text, kind in ((product.name, "product"), (product.category, "category")):
                    if not text or text.lower() in found:
                        continue
                    similarity = calculate_similarity(partial, text.lower())
                    if similarity >= SUGGESTION_SIMILARITY_THRESHOLD:
                        found[text.lower()] = {
                            "text": text,
                            "type": kind,
                            "similarity": similarity,
                        }

        ordered = sorted(found.values(), key=lambda item: item.get("similarity", 0), reverse=True)
        return [
            {"text": item["text"], "type": item["type"]}
            for item in ordered[: const.AUTOCOMPLETE_LIMIT]
        ]

    @staticmethod
    def trending(limit=None):
        limit = clamp(limit, const.TRENDING_DEFAULT_LIMIT, 1, const.TRENDING_MAX_LIMIT)
        categories = SearchService.distinct_categories()
        stats = [
            {"name": category, "count": Product.objects(category=category).count()}
            for category in categories
        ]
        total = sum(item["count"] for item in stats)
        for item in stats:
            item["percentage"] = round(item["count"] * 100 / total, 1) if total else 0
        stats.sort(key=lambda item: item["count"], reverse=True)
        return {
            "trending": stats[:limit],
            "totalCategories": len(categories),
            "totalProducts": total,
        }

    @staticmethod
    def advanced_search(query=None, category=None, min_price=None, max_price=None, limit=None, skip=None):
        limit = clamp(limit, const.SEARCH_DEFAULT_LIMIT, 1, const.SEARCH_MAX_LIMIT)
        skip = clamp(skip, 0, 0, 10 ** 9)

        queryset = Product.objects()
        if category:
            queryset = queryset.filter(category__icontains=category)

        clean_query = sanitize_query(query)
        tokens = tokenize_query(clean_query)
        if tokens:
            queryset = queryset.filter(SearchService.token_filter(tokens))

        try:
            low = float(min_price) if min_price not in (None, "") else None
            high = float(max_price) if max_price not in (None, "") else None
        except (TypeError, ValueError):
            raise ValidationError("Invalid price range")

        products = []
        for product in queryset:
            price = product.selling_price
            if low is not None and (price is None or price < low):
                continue
            if high is not None and (price is None or price > high):
                continue
            products.append(product)

        if tokens:
            products = [product for product, _ in rank_products(products, tokens, clean_query)]

        results = [transform_product(product) for product in products]
        response = {"results": results[skip : skip + limit]}
        response.update(pagination(len(results), limit, skip))
        return response
