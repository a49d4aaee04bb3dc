from django.http import JsonResponse

def index(request):
    return JsonResponse({
        "message": "M-PESA STK Push relay",
        "endpoints": {
            "admin": "/admin/",
            "stk_push": "POST /stkpush",
            "mpesa_callback": "POST /callback",
            "payment_status": "GET /status/<transactionId>",
            "last_transaction": "GET /last-transaction",
        }
    })
